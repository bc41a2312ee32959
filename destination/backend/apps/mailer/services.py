import json
import smtplib

from django.conf import settings
from django.core.mail import EmailMultiAlternatives
from django.core.serializers.json import DjangoJSONEncoder
from django.template import Context, Template, TemplateSyntaxError
from django.template.loader import render_to_string
from django.utils import timezone
from django.utils.html import strip_tags
import structlog

from .models import EmailTemplate, EmailHistory

logger = structlog.get_logger(__name__)

DEFAULT_SUBJECTS = {
    'booking_confirmation': 'Booking confirmed: {{ item_name }} ({{ confirmation_number }})',
    'booking_status_update': 'Your booking {{ confirmation_number }} is now {{ booking_status }}',
    'admin_alert': '[Admin] {{ title }}',
    'registration_welcome': 'Welcome to {{ site_name }}, {{ user_name }}!',
    'registration_admin_notification': 'New user registered: {{ user_email }}',
    'submission_admin_notification': 'New {{ submission_type }} submission: {{ title }}',
    'submission_approval': 'Your submission "{{ title }}" has been approved',
    'submission_rejection': 'Update on your submission "{{ title }}"',
    'resource_assignment': 'Submission assigned to you: {{ title }}',
    'listing_invitation': 'List your business on {{ site_name }}',
    'password_reset': 'Reset your {{ site_name }} password',
    'contact_response': 'Re: {{ subject }}',
    'verification_test': '{{ site_name }} email configuration test',
}


class EmailSendError(Exception):
    pass


def _json_safe(context):
    return json.loads(json.dumps(context or {}, cls=DjangoJSONEncoder))


def render_workflow(workflow_type, context):
    """Return (subject, html, text, template) for a workflow."""
    ctx = {'site_name': settings.SITE_NAME, 'frontend_url': settings.FRONTEND_URL}
    ctx.update(context)
    template = EmailTemplate.active_for(workflow_type)
    if template:
        subject = Template(template.subject).render(Context(ctx))
        html = Template(template.html_content).render(Context(ctx))
        text = Template(template.plain_text_content).render(Context(ctx)) \
            if template.plain_text_content else strip_tags(html)
    else:
        subject = Template(DEFAULT_SUBJECTS[workflow_type]).render(Context(ctx))
        html = render_to_string(f'mailer/{workflow_type}.html', ctx)
        text = strip_tags(html)
    return ' '.join(subject.split()), html, text.strip(), template


def deliver(history):
    """Render and send a history row, updating its status."""
    try:
        subject, html, text, template = render_workflow(history.workflow_type, history.context)
        history.subject = subject[:300]
        history.template = template
        history.template_version = template.version if template else None
        msg = EmailMultiAlternatives(subject, text, settings.DEFAULT_FROM_EMAIL, [history.recipient])
        msg.attach_alternative(html, 'text/html')
        msg.send()
    except (smtplib.SMTPException, OSError, TemplateSyntaxError, ValueError) as e:
        history.status = 'failed'
        history.failure_reason = str(e)
        history.save()
        logger.warning('email send failed', workflow=history.workflow_type,
                       recipient=history.recipient, retry_count=history.retry_count, error=str(e))
        return False
    history.status = 'sent'
    history.sent_at = timezone.now()
    history.failure_reason = ''
    history.save()
    logger.info('email sent', workflow=history.workflow_type, recipient=history.recipient)
    return True


def send_workflow_email(workflow_type, recipient, context=None, user=None, related=None, metadata=None):
    if workflow_type not in DEFAULT_SUBJECTS:
        raise EmailSendError(f'Unknown email workflow: {workflow_type}')
    if not recipient:
        logger.warning('email skipped without recipient', workflow=workflow_type)
        return False
    history = EmailHistory.objects.create(
        recipient=recipient,
        subject=workflow_type,
        workflow_type=workflow_type,
        context=_json_safe(context),
        user=user if user is not None and user.pk else None,
        metadata=metadata or {},
        max_retries=settings.EMAIL_MAX_RETRIES,
        related_type=related._meta.label_lower if related is not None else '',
        related_id=str(related.pk) if related is not None else '',
    )
    return deliver(history)


def retry_failed_emails(limit=100):
    """Resend failed emails that still have retries left. Returns (retried, sent)."""
    retried = sent = 0
    for history in EmailHistory.objects.filter(status='failed').order_by('created_at')[:limit]:
        if not history.can_retry:
            continue
        history.retry_count += 1
        retried += 1
        if deliver(history):
            sent += 1
    logger.info('email retry finished', retried=retried, sent=sent)
    return retried, sent
