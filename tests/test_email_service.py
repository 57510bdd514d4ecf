from vx_academy.core.config import settings
from vx_academy.services import email_service


def test_templates_render_with_app_defaults():
    html = email_service.render_email_template(
        "welcome.html", {"APP_NAME": "VX Academy", "APP_FRONTEND_URL": "https://vx.example.com", "user_name": "Mariam"}
    )
    assert "Welcome to VX Academy, Mariam!" in html
    assert "https://vx.example.com" in html


def test_failed_assessment_mentions_the_passing_score():
    html = email_service.render_email_template(
        "assessment_result.html",
        {"assessment_title": "Safety", "user_name": "Omar", "score": 60, "passed": False, "passing_score": 70},
    )
    assert "60%" in html and "70%" in html
    assert "You passed" not in html


def test_unknown_template_is_not_sent():
    assert email_service.send_templated_email("a@example.com", "Hi", "missing.html", {}) is False


def test_unconfigured_smtp_only_logs(monkeypatch, caplog):
    monkeypatch.setattr(settings, "EMAIL_HOST", None)
    caplog.set_level("INFO", logger="vx_academy.services.email_service")

    assert email_service.send_welcome_email("new.hire@example.com", "New Hire") is True
    assert "SMTP not configured" in caplog.text


def test_smtp_credentials_are_omitted_for_anonymous_relays(monkeypatch):
    monkeypatch.setattr(settings, "EMAIL_HOST", "smtp.example.com")
    monkeypatch.setattr(settings, "EMAIL_USERNAME", None)

    options = email_service._smtp_options()

    assert options["host"] == "smtp.example.com"
    assert "user" not in options and "password" not in options
