"""Pydantic models for the JSON messages exchanged with the GSC server."""

from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer


class FilePurpose(str, Enum):
    """What a submitted file is for."""
    SOURCE = 'source'
    TEST = 'test'
    CONFIG = 'config'
    RESOURCE = 'resource'
    LOG = 'log'
    FORBIDDEN = 'forbidden'

    def to_char(self) -> str:
        return _PURPOSE_CHARS[self]

    def to_dir(self) -> str:
        """Subdirectory used when a whole homework is downloaded."""
        return _PURPOSE_DIRS[self]

    def is_auto_deletable(self) -> bool:
        return self is FilePurpose.LOG

    def is_text(self) -> bool:
        return self in (FilePurpose.SOURCE, FilePurpose.TEST, FilePurpose.CONFIG)


_PURPOSE_CHARS = {
    FilePurpose.SOURCE: 's',
    FilePurpose.TEST: 't',
    FilePurpose.CONFIG: 'c',
    FilePurpose.RESOURCE: 'r',
    FilePurpose.LOG: 'l',
    FilePurpose.FORBIDDEN: 'F',
}

_PURPOSE_DIRS = {
    FilePurpose.SOURCE: 'src',
    FilePurpose.TEST: 'test',
    FilePurpose.CONFIG: '.',
    FilePurpose.RESOURCE: 'Resources',
    FilePurpose.LOG: '.',
    FilePurpose.FORBIDDEN: '.',
}


class SubmissionStatus(str, Enum):
    FUTURE = 'future'
    OPEN = 'open'
    EXTENDED = 'extended'
    OVERTIME = 'overtime'
    SELF_EVAL = 'self_eval'
    EXTENDED_EVAL = 'extended_eval'
    CLOSED = 'closed'

    def describe(self) -> str:
        return _STATUS_DESCRIPTIONS[self]

    def is_self_eval(self) -> bool:
        return self in (
            SubmissionStatus.OVERTIME,
            SubmissionStatus.SELF_EVAL,
            SubmissionStatus.EXTENDED_EVAL,
        )


_STATUS_DESCRIPTIONS = {
    SubmissionStatus.FUTURE: 'future',
    SubmissionStatus.OPEN: 'open for submission',
    SubmissionStatus.EXTENDED: 'open for submission (extended)',
    SubmissionStatus.OVERTIME: 'overtime submission or self-eval',
    SubmissionStatus.SELF_EVAL: 'open for self evaluation',
    SubmissionStatus.EXTENDED_EVAL: 'open for self evaluation (extended)',
    SubmissionStatus.CLOSED: 'closed',
}


class SubmissionEvalStatus(str, Enum):
    EMPTY = 'empty'
    STARTED = 'started'
    OVERDUE = 'overdue'
    COMPLETE = 'complete'


class PartnerRequestStatus(str, Enum):
    OUTGOING = 'outgoing'
    INCOMING = 'incoming'
    ACCEPTED = 'accepted'
    CANCELED = 'canceled'


class UserRole(str, Enum):
    STUDENT = 'student'
    GRADER = 'grader'
    ADMIN = 'admin'


class EvalType(str, Enum):
    BOOLEAN = 'boolean'
    SCALE = 'scale'
    INFORMATIONAL = 'informational'


class JsonError(BaseModel):
    """Body of every non-2xx server response."""
    status: int
    title: str
    message: str = ''


class FileMeta(BaseModel):
    """Metadata of one submitted file."""
    model_config = ConfigDict(populate_by_name=True)

    hw: int = Field(alias='assignment_number')
    byte_count: int
    media_type: str
    name: str
    purpose: FilePurpose
    upload_time: datetime
    uri: str

    def __str__(self) -> str:
        return f"hw{self.hw}:{self.name}"


class UserShort(BaseModel):
    name: str
    uri: str


class SubmissionShort(BaseModel):
    """Entry of a user's submission list."""
    assignment_number: int
    id: int
    uri: str
    status: SubmissionStatus
    grade: float
    owner1: UserShort
    owner2: Optional[UserShort] = None


class Submission(BaseModel):
    """Full submission record."""
    assignment_number: int
    id: int
    uri: str
    grade: float
    files_uri: str
    evals_uri: str
    owner1: UserShort
    owner2: Optional[UserShort] = None
    bytes_used: int
    bytes_quota: int
    open_date: datetime
    due_date: datetime
    eval_date: datetime
    last_modified: datetime
    eval_status: SubmissionEvalStatus
    status: SubmissionStatus

    def quota_remaining(self) -> float:
        if self.bytes_quota == 0:
            return 0.0
        return 100.0 * (self.bytes_quota - self.bytes_used) / self.bytes_quota

    def owners(self) -> str:
        if self.owner2 is None:
            return self.owner1.name
        return f"{self.owner1.name} and {self.owner2.name}"


class ExamGrade(BaseModel):
    number: int
    points: int
    possible: int


class PartnerRequest(BaseModel):
    assignment_number: int
    user: str
    status: PartnerRequestStatus


class User(BaseModel):
    """Full user record."""
    name: str
    uri: str
    submissions_uri: str
    role: UserRole
    exam_grades: List[ExamGrade] = []
    partner_requests: List[PartnerRequest] = []
    submissions: List[SubmissionShort] = []


class SelfEval(BaseModel):
    uri: str = ''
    score: float
    explanation: str
    permalink: str = ''


class GraderEval(BaseModel):
    uri: str
    grader: str
    score: float
    explanation: str
    status: str


class Eval(BaseModel):
    """One self-evaluation item with the student's and grader's answers."""
    uri: str
    sequence: int
    submission_uri: str
    eval_type: EvalType = Field(alias='type')
    prompt: str
    value: float
    self_eval: Optional[SelfEval] = None
    grader_eval: Optional[GraderEval] = None


class SelfEvalChange(BaseModel):
    score: float
    explanation: str


class FileMetaChange(BaseModel):
    """PATCH body for renaming or moving a remote file."""
    model_config = ConfigDict(populate_by_name=True)

    hw: Optional[int] = Field(default=None, serialization_alias='assignment_number')
    name: Optional[str] = None
    purpose: Optional[FilePurpose] = None
    overwrite: bool = False

    def to_json(self) -> dict:
        return self.model_dump(mode='json', by_alias=True, exclude_none=True)


class UserCreate(BaseModel):
    name: str
    role: UserRole = UserRole.STUDENT


class UserChange(BaseModel):
    """PATCH body for a user; only set fields are sent."""
    password: Optional[str] = None
    role: Optional[UserRole] = None
    partner_requests: List[PartnerRequest] = []
    exam_grades: List[ExamGrade] = []

    def to_json(self) -> dict:
        data = self.model_dump(mode='json', exclude_none=True)
        for key in ('partner_requests', 'exam_grades'):
            if not data[key]:
                del data[key]
        return data


class SubmissionChange(BaseModel):
    """PATCH body for a submission (extensions, divorce)."""
    due_date: Optional[datetime] = None
    eval_date: Optional[datetime] = None
    bytes_quota: Optional[int] = None
    remove_owner2: bool = False

    @field_serializer('due_date', 'eval_date')
    def _serialize_date(self, value: Optional[datetime]):
        if value is None:
            return None
        utc = value.astimezone(timezone.utc)
        return utc.strftime('%Y-%m-%dT%H:%M:%S.') + f"{utc.microsecond // 1000:03d}Z"

    def to_json(self) -> dict:
        data = self.model_dump(mode='json', exclude_none=True, exclude={'remove_owner2'})
        if self.remove_owner2:
            data['owner2'] = None
        return data
