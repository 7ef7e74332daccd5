from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Role(str, Enum):
    STUDENT = "student"
    TEACHER = "teacher"
    NONE = "none"

    @classmethod
    def parse(cls, value: Optional[str]) -> "Role":
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.NONE


@dataclass(frozen=True)
class RequestContext:
    """Identity of the caller for a single request.

    Built by the auth dependency and handed explicitly to every service that
    needs to know who is acting.
    """

    user_id: str
    role: Role
    email: Optional[str] = None

    @property
    def is_teacher(self) -> bool:
        return self.role == Role.TEACHER

    @property
    def is_student(self) -> bool:
        return self.role == Role.STUDENT
