from ti_dding.main import app

app(prog_name="ti-dding")
