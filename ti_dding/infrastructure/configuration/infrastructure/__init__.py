from ti_dding.infrastructure.configuration.infrastructure.app import AppSettings

__all__ = ["AppSettings"]
