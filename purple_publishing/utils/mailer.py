"""Outbound email.

Two delivery policies apply:

* ``notify_new_submission`` is best effort. Failures are logged and
  swallowed so a submission is never lost because SMTP is down.
* ``send_reply`` is the primary effect of its request. Failures raise
  ``DeliveryError`` and the caller must not record the reply.
"""

import smtplib
from flask import current_app, render_template
from flask_mail import BadHeaderError, Message
from purple_publishing.errors import DeliveryError, ValidationError
from purple_publishing.extensions import mail
from purple_publishing.models import SubmissionType
from purple_publishing.utils.dates import isoformat

# Type-specific notification recipient, by config key
TYPE_RECIPIENTS = {
    SubmissionType.DEMO_UPLOAD: 'NOTIFY_SHARED_INBOX',
    SubmissionType.ARTIST_INFORMATION: 'NOTIFY_PUBLISHING',
    SubmissionType.SONGWRITER_INFORMATION: 'NOTIFY_PUBLISHING',
    SubmissionType.SYNC_REQUEST: 'NOTIFY_PUBLISHING',
    SubmissionType.GENERAL_CONTACT_INQUIRY: 'NOTIFY_INFO',
    SubmissionType.SUPPORT_FORM: 'NOTIFY_SUPPORT',
}


def resolve_recipients(submission_type):
    """Internal recipients for a new submission of ``submission_type``."""
    config = current_app.config
    candidates = [config.get('NOTIFY_SHARED_INBOX')]
    if submission_type == SubmissionType.SYNC_REQUEST:
        candidates.append(config.get('NOTIFY_LEGAL'))
    candidates.append(config.get(TYPE_RECIPIENTS.get(submission_type, '')))

    recipients, seen = [], set()
    for address in candidates:
        address = (address or '').strip()
        if address and address.lower() not in seen:
            seen.add(address.lower())
            recipients.append(address)
    return recipients


def notify_new_submission(submission):
    """Send the internal notification for a new submission, best effort."""
    recipients = resolve_recipients(submission.type)
    if not recipients:
        return 0

    domain = submission.domain or 'unknown-domain'
    subject = f'New {submission.type.value} submission [{domain}] ({submission.id})'
    sent = 0
    try:
        body = render_template('email/submission_notification.txt',
                               submission=submission,
                               created_at=isoformat(submission.created_at))
        for recipient in recipients:
            mail.send(Message(subject=subject, recipients=[recipient], body=body))
            sent += 1
    except Exception:
        current_app.logger.warning(
            'Submission notification failed', exc_info=True,
            extra={'component': 'mailer',
                   'context': {'submission_id': submission.id, 'sent': sent}})
    return sent


def send_reply(to_email, subject, body):
    """Send a staff reply; raises DeliveryError when the message is not sent."""
    message = Message(subject=subject, recipients=[to_email], body=body)
    try:
        mail.send(message)
    except BadHeaderError:
        raise ValidationError('Subject and recipient must be single lines.')
    except (smtplib.SMTPException, OSError) as exc:
        current_app.logger.error('Reply delivery failed: %s', exc,
                                 extra={'component': 'mailer', 'context': {'to': to_email}})
        raise DeliveryError('The reply email could not be sent.') from exc
    current_app.logger.info('Reply sent', extra={'component': 'mailer',
                                                 'context': {'to': to_email}})


def render_rejection_body(submission):
    """Render the demo rejection letter for ``submission``."""
    return render_template('email/demo_rejection.txt',
                           artist_name=submission.display_name(),
                           track_title=submission.track_title(),
                           signature=current_app.config['REJECTION_SIGNATURE'])
