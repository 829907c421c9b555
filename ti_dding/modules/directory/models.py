"""Organisation directory models."""

from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Department(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    name: str = ""

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, value: Any) -> str:
        # department/list returns numeric ids
        return str(value)


class Employee(BaseModel):
    """One employee as exported to ``employees.csv``."""

    user_id: str
    name: str = ""
    mobile: str = ""
    department: str = ""
    position: str = ""
    email: str = ""

    @classmethod
    def from_user_detail(cls, detail: Dict[str, Any], department: str) -> "Employee":
        return cls(
            user_id=str(detail.get("userid", "")),
            name=detail.get("name") or "",
            mobile=detail.get("mobile") or "",
            department=department,
            position=detail.get("position") or "",
            email=detail.get("email") or "",
        )


class DirectoryExport(BaseModel):
    """Result of a directory walk."""

    departments: List[Department] = Field(default_factory=list)
    employees: List[Employee] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
