"""Form submission models and the inbox status workflow."""

import enum
import uuid
from purple_publishing.extensions import db
from purple_publishing.utils.dates import utcnow, isoformat


class _CodedEnum(enum.Enum):
    """Enum whose wire name is its value; numeric codes follow declaration order."""

    @property
    def code(self):
        return list(type(self)).index(self) + 1

    @classmethod
    def parse(cls, raw):
        """Resolve a name (case-insensitive) or numeric code, else None."""
        if raw is None:
            return None
        text = str(raw).strip()
        if text.isdecimal():
            members = list(cls)
            index = int(text) - 1
            return members[index] if 0 <= index < len(members) else None
        for member in cls:
            if member.value.lower() == text.lower():
                return member
        return None


class SubmissionType(_CodedEnum):
    DEMO_UPLOAD = 'DemoUpload'
    ARTIST_INFORMATION = 'ArtistInformation'
    SONGWRITER_INFORMATION = 'SongwriterInformation'
    SYNC_REQUEST = 'SyncRequest'
    GENERAL_CONTACT_INQUIRY = 'GeneralContactInquiry'
    SUPPORT_FORM = 'SupportForm'


class SubmissionStatus(_CodedEnum):
    UNREAD = 'Unread'
    READ = 'Read'
    IN_PROGRESS = 'InProgress'
    DONE = 'Done'
    ACCEPTED = 'Accepted'
    REJECTED = 'Rejected'


WORKFLOW_STATUSES = frozenset({
    SubmissionStatus.UNREAD,
    SubmissionStatus.READ,
    SubmissionStatus.IN_PROGRESS,
    SubmissionStatus.DONE,
})
TERMINAL_STATUSES = frozenset({SubmissionStatus.ACCEPTED, SubmissionStatus.REJECTED})

# Allowed targets per current status. Terminal statuses only apply to the
# types listed in TERMINAL_TYPES.
TRANSITIONS = {status: WORKFLOW_STATUSES | TERMINAL_STATUSES for status in WORKFLOW_STATUSES}
TRANSITIONS.update({status: frozenset() for status in TERMINAL_STATUSES})
TERMINAL_TYPES = frozenset({SubmissionType.DEMO_UPLOAD})

ARTIST_NAME_FIELDS = ('artistName', 'artist', 'name')
TRACK_TITLE_FIELDS = ('trackTitle', 'track', 'title', 'songTitle', 'song')
REJECTION_FIELD = 'autoRejectionBody'


def _enum_column(enum_cls):
    return db.Enum(enum_cls, values_callable=lambda members: [m.value for m in members],
                   native_enum=False, length=32, validate_strings=True)


class Submission(db.Model):
    """One public contact, demo or inquiry form."""
    __tablename__ = 'submissions'

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    type = db.Column(_enum_column(SubmissionType), nullable=False,
                     default=SubmissionType.GENERAL_CONTACT_INQUIRY)
    status = db.Column(_enum_column(SubmissionStatus), nullable=False,
                       default=SubmissionStatus.UNREAD, index=True)
    domain = db.Column(db.String(255), nullable=False, default='')
    name = db.Column(db.String(255), nullable=False)
    email = db.Column(db.String(255), nullable=False)
    message = db.Column(db.Text)
    uploaded_by = db.Column(db.String(50))
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow, index=True)

    # Relationships
    fields = db.relationship('SubmissionField', backref='submission',
                             cascade='all, delete-orphan', order_by='SubmissionField.id')
    files = db.relationship('SubmissionFile', backref='submission',
                            cascade='all, delete-orphan')
    replies = db.relationship('SubmissionReply', backref='submission', lazy='dynamic',
                              cascade='all, delete-orphan')

    @property
    def storage_key(self):
        """Directory name of this submission's attachments."""
        return uuid.UUID(self.id).hex

    def check_transition(self, new_status):
        """Check whether the status may change to ``new_status``."""
        if new_status in TERMINAL_STATUSES and self.type not in TERMINAL_TYPES:
            return False, 'Accept/Reject is only for DemoUpload.'
        if new_status not in TRANSITIONS[self.status]:
            return False, 'Cannot change status after Accept/Reject.'
        return True, None

    def field_value(self, *names):
        """First non-blank value among fields named ``names`` (case-insensitive)."""
        for name in names:
            for field in self.fields:
                if field.name.lower() == name.lower() and field.value and field.value.strip():
                    return field.value.strip()
        return None

    def set_field(self, name, value):
        """Insert or update a single named field."""
        for field in self.fields:
            if field.name == name:
                field.value = value
                return field
        field = SubmissionField(name=name, value=value)
        self.fields.append(field)
        return field

    def display_name(self):
        name = (self.name or '').strip()
        return name or self.field_value(*ARTIST_NAME_FIELDS) or 'there'

    def track_title(self):
        return self.field_value(*TRACK_TITLE_FIELDS) or 'your track'

    def to_dict(self, include_replies=False):
        data = {
            'id': self.id,
            'type': self.type.value,
            'status': self.status.value,
            'domain': self.domain,
            'name': self.name,
            'email': self.email,
            'message': self.message,
            'uploadedBy': self.uploaded_by,
            'createdAt': isoformat(self.created_at),
            'repliesCount': self.replies.count(),
            'fields': [f.to_dict() for f in self.fields],
            'files': [f.to_dict() for f in self.files],
        }
        if include_replies:
            data['replies'] = [r.to_dict() for r in self.newest_replies()]
        return data

    def newest_replies(self):
        return self.replies.order_by(SubmissionReply.sent_at.desc()).all()

    def __repr__(self):
        return f'<Submission {self.type.value} {self.id}>'


class SubmissionField(db.Model):
    """Free-form name/value pair attached to a submission."""
    __tablename__ = 'submission_fields'

    id = db.Column(db.Integer, primary_key=True)
    submission_id = db.Column(db.String(36), db.ForeignKey('submissions.id'),
                              nullable=False, index=True)
    name = db.Column(db.String(200), nullable=False)
    value = db.Column(db.Text, nullable=False, default='')

    def to_dict(self):
        return {'name': self.name, 'value': self.value}

    def __repr__(self):
        return f'<SubmissionField {self.name}>'


class SubmissionFile(db.Model):
    """Uploaded attachment stored under the private upload root."""
    __tablename__ = 'submission_files'

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    submission_id = db.Column(db.String(36), db.ForeignKey('submissions.id'),
                              nullable=False, index=True)
    file_name = db.Column(db.String(255), nullable=False)
    file_path = db.Column(db.String(500), nullable=False)  # relative to PRIVATE_UPLOAD_FOLDER
    content_type = db.Column(db.String(150), nullable=False, default='application/octet-stream')
    size = db.Column(db.BigInteger, nullable=False, default=0)

    def to_dict(self):
        return {
            'id': self.id,
            'fileName': self.file_name,
            'contentType': self.content_type,
            'size': self.size,
        }

    def __repr__(self):
        return f'<SubmissionFile {self.file_name}>'


class SubmissionReply(db.Model):
    """Email sent to the submitter from the inbox."""
    __tablename__ = 'submission_replies'

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    submission_id = db.Column(db.String(36), db.ForeignKey('submissions.id'),
                              nullable=False, index=True)
    to_email = db.Column(db.String(255), nullable=False)
    subject = db.Column(db.String(500), nullable=False)
    body = db.Column(db.Text, nullable=False)
    sent_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    sent_by = db.Column(db.String(255), nullable=False, default='unknown')

    def to_dict(self):
        return {
            'id': self.id,
            'toEmail': self.to_email,
            'subject': self.subject,
            'body': self.body,
            'sentAt': isoformat(self.sent_at),
            'sentBy': self.sent_by,
        }

    def __repr__(self):
        return f'<SubmissionReply {self.subject}>'
