import logging
import emails # Library for composing and sending emails
from emails.template import JinjaTemplate # For HTML templating
from typing import Dict, Any, Optional

from vx_academy.core.config import settings # For email server configuration

logger = logging.getLogger(__name__)

# --- Templates ---
# Kept inline: the backend only sends a handful of short transactional emails.

EMAIL_TEMPLATES: Dict[str, str] = {
    "welcome.html": (
        "<h1>Welcome to {{ APP_NAME }}, {{ user_name }}!</h1>"
        "<p>Your account has been created. Sign in at "
        "<a href=\"{{ APP_FRONTEND_URL }}\">{{ APP_FRONTEND_URL }}</a> to start learning.</p>"
    ),
    "certificate_issued.html": (
        "<h1>Congratulations, {{ user_name }}!</h1>"
        "<p>You have completed <strong>{{ course_name }}</strong>.</p>"
        "<p>Certificate number: {{ certificate_number }}<br>"
        "Valid until: {{ expiry_date }}</p>"
        "<p>View your certificates at <a href=\"{{ APP_FRONTEND_URL }}/certificates\">{{ APP_FRONTEND_URL }}/certificates</a>.</p>"
    ),
    "assessment_result.html": (
        "<h1>{{ assessment_title }}</h1>"
        "<p>Hi {{ user_name }}, you scored {{ score }}%. "
        "{% if passed %}You passed!{% else %}The passing score is {{ passing_score }}%.{% endif %}</p>"
    ),
}

def email_enabled() -> bool:
    return bool(settings.EMAIL_HOST and settings.EMAIL_FROM_ADDRESS)

def _smtp_options() -> Dict[str, Any]:
    options = {
        "host": settings.EMAIL_HOST,
        "port": settings.EMAIL_PORT,
        "tls": settings.EMAIL_USE_TLS,
        "ssl": settings.EMAIL_USE_SSL,
    }
    # Anonymous relays get neither user nor password
    if settings.EMAIL_USERNAME:
        options["user"] = settings.EMAIL_USERNAME
        options["password"] = settings.EMAIL_PASSWORD or ""
    return options

# --- Sending ---

def send_email(to_email: str, subject: str, html_content: str) -> bool:
    """
    Sends one HTML email over SMTP.

    Without EMAIL_HOST and EMAIL_FROM_ADDRESS the message is only logged and
    the call counts as delivered, which keeps local and test runs quiet.
    """
    if not email_enabled():
        logger.info(f"Email not sent (SMTP not configured) [To: {to_email}, Subject: {subject}]")
        logger.debug(f"Body preview: {html_content[:300]}")
        return True

    message = emails.Message(
        subject=subject,
        html=html_content,
        mail_from=(settings.EMAIL_FROM_NAME, settings.EMAIL_FROM_ADDRESS)
    )
    logger.info(f"Sending '{subject}' to {to_email} via {settings.EMAIL_HOST}:{settings.EMAIL_PORT}")
    try:
        response = message.send(to=to_email, smtp=_smtp_options())
    except Exception as e:
        logger.error(f"SMTP error while mailing {to_email}: {e}", exc_info=True)
        return False

    if response is not None and response.status_code in (250, 252):
        return True
    status_code = response.status_code if response is not None else None
    error = response.error if response is not None else None
    logger.error(f"Mail to {to_email} was refused. SMTP status: {status_code}, error: {error}")
    return False

def render_email_template(template_name: str, context: Dict[str, Any]) -> str:
    """Renders one of EMAIL_TEMPLATES with Jinja2. Raises KeyError for an unknown template."""
    return JinjaTemplate(EMAIL_TEMPLATES[template_name]).render(**context)

def send_templated_email(
    to_email: str,
    subject: str,
    html_template_name: str,
    context: Dict[str, Any]
) -> bool:
    """
    Renders an HTML email template and sends it. Never raises: email is
    best-effort and must not undo the write that triggered it.
    """
    full_context = {"APP_NAME": settings.PROJECT_NAME, "APP_FRONTEND_URL": settings.APP_FRONTEND_URL}
    full_context.update(context)
    try:
        html_content = render_email_template(html_template_name, full_context)
    except KeyError:
        logger.error(f"Unknown email template '{html_template_name}', nothing sent to {to_email}")
        return False
    except Exception as e:
        logger.error(f"Rendering '{html_template_name}' failed: {e}", exc_info=True)
        return False
    return send_email(to_email=to_email, subject=subject, html_content=html_content)

# --- Domain emails ---

def send_welcome_email(to_email: str, user_name: str) -> bool:
    return send_templated_email(
        to_email, f"Welcome to {settings.PROJECT_NAME}", "welcome.html", {"user_name": user_name}
    )

def send_certificate_email(to_email: str, user_name: str, course_name: str, certificate_number: str, expiry_date: str) -> bool:
    return send_templated_email(
        to_email,
        f"Your {settings.PROJECT_NAME} certificate",
        "certificate_issued.html",
        {
            "user_name": user_name,
            "course_name": course_name,
            "certificate_number": certificate_number,
            "expiry_date": expiry_date,
        },
    )

def send_assessment_result_email(
    to_email: str,
    user_name: str,
    assessment_title: str,
    score: int,
    passed: bool,
    passing_score: Optional[int] = None,
) -> bool:
    return send_templated_email(
        to_email,
        f"Result: {assessment_title}",
        "assessment_result.html",
        {
            "user_name": user_name,
            "assessment_title": assessment_title,
            "score": score,
            "passed": passed,
            "passing_score": passing_score,
        },
    )
