"""Public form intake and the staff inbox."""

import csv
import io
import json
from flask import Blueprint, Response, current_app, jsonify, request, send_file, stream_with_context
from flask_login import current_user
from sqlalchemy import or_
from sqlalchemy.orm import selectinload
from purple_publishing.errors import NotFoundError, ValidationError
from purple_publishing.extensions import db
from purple_publishing.models import (Submission, SubmissionField, SubmissionFile,
                                      SubmissionReply, SubmissionStatus, SubmissionType,
                                      ROLE_ADMIN, ROLE_INBOX)
from purple_publishing.models.submission import REJECTION_FIELD, WORKFLOW_STATUSES
from purple_publishing.utils import mailer, storage
from purple_publishing.utils.dates import isoformat, parse_datetime, utcnow
from purple_publishing.utils.decorators import admin_required, roles_required
from purple_publishing.utils.http import form_files, form_value, json_body, parse_bool, text

submissions_bp = Blueprint('submissions', __name__)

UPLOADED_BY_VALUES = ('artist', 'manager')
EXPORT_HEADER = 'Id,Name,Email,Type,Status,Domain,UploadedBy,HasFiles,Message,CreatedAt\n'
CSV_BOM = '\ufeff'


def _parse_fields_json(raw):
    """Decode ``fieldsJson`` into an ordered name -> value dict."""
    if raw is None or not raw.strip():
        return {}
    try:
        data = json.loads(raw)
    except ValueError:
        raise ValidationError('fieldsJson must be a JSON object.')
    if not isinstance(data, dict):
        raise ValidationError('fieldsJson must be a JSON object.')

    fields = {}
    for key, value in data.items():
        key = key.strip()
        if not key:
            continue
        if value is None:
            value = ''
        elif isinstance(value, bool):
            value = 'true' if value else 'false'
        elif not isinstance(value, str):
            value = json.dumps(value) if isinstance(value, (dict, list)) else str(value)
        fields[key] = value.strip()
    return fields


def _validate_files(submission_type, uploaded_by, files):
    if submission_type == SubmissionType.DEMO_UPLOAD:
        if not uploaded_by:
            raise ValidationError('UploadedBy is required for DemoUpload.')
        if uploaded_by.lower() not in UPLOADED_BY_VALUES:
            raise ValidationError('UploadedBy must be Artist or Manager.')
        if not files:
            raise ValidationError('At least one file is required for DemoUpload.')

    if submission_type == SubmissionType.SONGWRITER_INFORMATION:
        if not files:
            raise ValidationError('Photo is required for SongwriterInformation.')
        if len(files) > 1:
            raise ValidationError('Only one photo is allowed for SongwriterInformation.')
        if not (files[0].content_type or '').lower().startswith('image/'):
            raise ValidationError('Photo must be an image file.')


@submissions_bp.route('/form', methods=['POST'])
def create_form():
    """Accept a public form post with optional attachments."""
    name = text(form_value('name'))
    email = text(form_value('email'))
    if not name or not email:
        raise ValidationError('Name and Email are required.')

    raw_type = text(form_value('type'))
    submission_type = SubmissionType.GENERAL_CONTACT_INQUIRY
    if raw_type:
        submission_type = SubmissionType.parse(raw_type)
        if submission_type is None:
            raise ValidationError(f'Unknown submission type: {raw_type}.')

    uploaded_by = text(form_value('uploadedBy')) or None
    files = form_files('files')
    _validate_files(submission_type, uploaded_by, files)

    fields = _parse_fields_json(form_value('fieldsJson'))
    if uploaded_by:
        fields['uploadedBy'] = uploaded_by

    message = text(form_value('message'))
    submission = Submission(
        type=submission_type,
        status=SubmissionStatus.UNREAD,
        domain=text(form_value('domain')),
        name=name,
        email=email,
        message=message or None,
        uploaded_by=uploaded_by,
        created_at=utcnow()
    )
    db.session.add(submission)
    db.session.flush()

    for field_name, value in fields.items():
        submission.fields.append(SubmissionField(name=field_name, value=value))

    for file in files:
        relative_path, size = storage.save_submission_file(submission.storage_key, file)
        submission.files.append(SubmissionFile(
            file_name=file.filename,
            file_path=relative_path,
            content_type=file.content_type or storage.DEFAULT_CONTENT_TYPE,
            size=size
        ))

    db.session.commit()
    current_app.logger.info('Submission received', extra={
        'component': 'intake',
        'context': {'submission_id': submission.id, 'type': submission_type.value,
                    'files': len(files)}
    })

    mailer.notify_new_submission(submission)
    return jsonify({'id': submission.id})


def _int_arg(name, default):
    value = request.args.get(name)
    if value is None or not value.strip():
        return default
    try:
        return int(value)
    except ValueError:
        raise ValidationError(f'{name} must be an integer.')


def _enum_arg(name, enum_cls):
    value = text(request.args.get(name))
    if not value:
        return None
    member = enum_cls.parse(value)
    if member is None:
        raise ValidationError(f'Invalid {name}: {value}.')
    return member


def _date_arg(name, end_of_day=False):
    value = text(request.args.get(name))
    if not value:
        return None
    try:
        return parse_datetime(value, end_of_day=end_of_day)
    except ValueError:
        raise ValidationError(f'{name} must be an ISO-8601 date or datetime.')


def _filtered_query():
    """Submission query narrowed by the inbox list filters."""
    query = Submission.query

    status = _enum_arg('status', SubmissionStatus)
    if status is not None:
        query = query.filter(Submission.status == status)

    submission_type = _enum_arg('type', SubmissionType)
    if submission_type is not None:
        query = query.filter(Submission.type == submission_type)

    date_from = _date_arg('from')
    if date_from is not None:
        query = query.filter(Submission.created_at >= date_from)

    date_to = _date_arg('to', end_of_day=True)
    if date_to is not None:
        query = query.filter(Submission.created_at <= date_to)

    search = text(request.args.get('search'))
    if search:
        # Literal match: % and _ in the search text are escaped
        field_matches = db.session.query(SubmissionField.submission_id).filter(
            or_(SubmissionField.name.icontains(search, autoescape=True),
                SubmissionField.value.icontains(search, autoescape=True))
        )
        query = query.filter(or_(
            Submission.name.icontains(search, autoescape=True),
            Submission.email.icontains(search, autoescape=True),
            Submission.domain.icontains(search, autoescape=True),
            Submission.message.icontains(search, autoescape=True),
            Submission.id.icontains(search, autoescape=True),
            Submission.id.in_(field_matches)
        ))

    has_file = parse_bool(request.args.get('hasFile'), 'hasFile')
    if has_file is True:
        query = query.filter(Submission.files.any())
    elif has_file is False:
        query = query.filter(~Submission.files.any())

    return query.order_by(Submission.created_at.desc())


def _get_submission(submission_id):
    submission = db.session.get(Submission, submission_id)
    if submission is None:
        raise NotFoundError('Submission not found.')
    return submission


@submissions_bp.route('')
@roles_required(ROLE_ADMIN, ROLE_INBOX)
def list_submissions():
    """Paginated inbox list, newest first."""
    page = max(_int_arg('page', 1), 1)
    page_size = _int_arg('pageSize', current_app.config['SUBMISSIONS_PAGE_SIZE'])
    if page_size < 1:
        page_size = current_app.config['SUBMISSIONS_PAGE_SIZE']
    page_size = min(page_size, current_app.config['SUBMISSIONS_MAX_PAGE_SIZE'])

    pagination = _filtered_query().paginate(page=page, per_page=page_size,
                                            error_out=False, count=True)
    return jsonify({
        'total': pagination.total,
        'page': page,
        'pageSize': page_size,
        'items': [s.to_dict() for s in pagination.items]
    })


@submissions_bp.route('/<submission_id>')
@roles_required(ROLE_ADMIN, ROLE_INBOX)
def get_submission(submission_id):
    submission = _get_submission(submission_id)
    return jsonify(submission.to_dict(include_replies=True))


@submissions_bp.route('/<submission_id>/status', methods=['PUT'])
@roles_required(ROLE_ADMIN, ROLE_INBOX)
def update_status(submission_id):
    """Move a submission between workflow statuses."""
    submission = _get_submission(submission_id)
    status = SubmissionStatus.parse(json_body().get('status'))
    if status not in WORKFLOW_STATUSES:
        raise ValidationError('Status must be Unread, Read, InProgress, or Done.')

    _apply_status(submission, status)
    return jsonify(submission.to_dict())


def _apply_status(submission, status):
    ok, message = submission.check_transition(status)
    if not ok:
        raise ValidationError(message)
    previous = submission.status
    submission.status = status
    db.session.commit()
    current_app.logger.info('Submission status changed', extra={
        'component': 'inbox',
        'context': {'submission_id': submission.id, 'from': previous.value,
                    'to': status.value, 'user_id': current_user.id}
    })


@submissions_bp.route('/<submission_id>/reply', methods=['POST'])
@roles_required(ROLE_ADMIN, ROLE_INBOX)
def reply(submission_id):
    """Email the submitter and record the reply once it has been sent."""
    submission = _get_submission(submission_id)
    data = json_body()
    to_email = text(data.get('toEmail'))
    subject = text(data.get('subject'))
    body = text(data.get('body'))
    if not to_email or not subject or not body:
        raise ValidationError('ToEmail, Subject and Body are required.')

    mailer.send_reply(to_email, subject, body)

    submission.replies.append(SubmissionReply(
        to_email=to_email,
        subject=subject,
        body=body,
        sent_at=utcnow(),
        sent_by=current_user.email or 'unknown'
    ))
    db.session.commit()
    return jsonify({'replies': [r.to_dict() for r in submission.newest_replies()]})


@submissions_bp.route('/<submission_id>/files/<file_id>/download')
@roles_required(ROLE_ADMIN, ROLE_INBOX)
def download_file(submission_id, file_id):
    """Stream one attachment under its original name."""
    attachment = SubmissionFile.query.filter_by(id=file_id, submission_id=submission_id).first()
    if attachment is None:
        raise NotFoundError('File not found.')

    full_path = storage.resolve_private_path(attachment.file_path)
    if full_path is None:
        current_app.logger.warning('Attachment missing on disk', extra={
            'component': 'storage',
            'context': {'file_id': attachment.id, 'path': attachment.file_path}
        })
        raise NotFoundError('File not found.')

    return send_file(full_path,
                     mimetype=attachment.content_type or storage.DEFAULT_CONTENT_TYPE,
                     as_attachment=True,
                     download_name=attachment.file_name)


@submissions_bp.route('/<submission_id>', methods=['DELETE'])
@admin_required
def delete_submission(submission_id):
    """Delete a submission with its replies, fields and files."""
    submission = _get_submission(submission_id)
    storage_key = submission.storage_key

    SubmissionReply.query.filter_by(submission_id=submission.id).delete()
    db.session.delete(submission)
    db.session.commit()
    current_app.logger.info('Submission deleted', extra={
        'component': 'inbox',
        'context': {'submission_id': submission_id, 'user_id': current_user.id}
    })

    storage.remove_submission_dir(storage_key)
    return '', 204


@submissions_bp.route('/<submission_id>/accept', methods=['PUT'])
@admin_required
def accept(submission_id):
    submission = _get_submission(submission_id)
    _apply_status(submission, SubmissionStatus.ACCEPTED)
    return jsonify(submission.to_dict())


@submissions_bp.route('/<submission_id>/reject', methods=['PUT'])
@admin_required
def reject(submission_id):
    """Reject a demo and store the rejection letter. No email is sent."""
    submission = _get_submission(submission_id)
    ok, message = submission.check_transition(SubmissionStatus.REJECTED)
    if not ok:
        raise ValidationError(message)

    body = mailer.render_rejection_body(submission)
    submission.set_field(REJECTION_FIELD, body)
    _apply_status(submission, SubmissionStatus.REJECTED)
    return jsonify({'body': body})


@submissions_bp.route('/export')
@admin_required
def export():
    """CSV export of the filtered inbox."""
    rows = []
    query = _filtered_query().options(selectinload(Submission.files))
    for s in query.limit(current_app.config['EXPORT_MAX_ROWS']).all():
        rows.append([
            s.id,
            s.name,
            s.email,
            s.type.value,
            s.status.value,
            s.domain,
            s.uploaded_by or '',
            'yes' if s.files else 'no',
            s.message or '',
            isoformat(s.created_at)
        ])

    def generate():
        yield CSV_BOM + EXPORT_HEADER
        buffer = io.StringIO()
        writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator='\n')
        for row in rows:
            writer.writerow(row)
            yield buffer.getvalue()
            buffer.seek(0)
            buffer.truncate(0)

    filename = f'submissions_{utcnow():%Y%m%d%H%M}.csv'
    return Response(stream_with_context(generate()),
                    mimetype='text/csv',
                    headers={'Content-Disposition': f'attachment; filename={filename}'})
