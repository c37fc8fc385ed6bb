import html
import os
import smtplib
from datetime import datetime
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from schemas.mail import MailMessage
from utils.logger_factory import new_logger

log = new_logger("mail_service")


def format_application_mail(application) -> MailMessage:
    """Subject and body announcing a newly submitted job application."""
    body = f"""A new job application has been received:

Role: {application.role}
Organization: {application.organization}
HR Name: {application.hr_name}
Email: {application.email}
Phone: {application.phone}
Salary: {application.salary or 'Not specified'}

Description:
{application.description}
"""
    return MailMessage(subject="New Job Application Received", body=body)


def _html_part(message: MailMessage, sent_at: datetime) -> str:
    paragraphs = html.escape(message.body).replace("\n", "<br>")
    return f"""
<div style="font-family: Arial, sans-serif; padding: 20px;">
  <h2>{html.escape(message.subject)}</h2>
  <p>{paragraphs}</p>
  <p>Time: {sent_at.strftime('%Y-%m-%d %H:%M:%S')}</p>
</div>
"""


def send_notification_email(message: MailMessage) -> bool:
    """
    Send a notification to MAIL_TO over SMTP.

    Runs as a background task after the response has gone out, so failures
    are logged and reported through the return value instead of raised.
    """
    smtp_server = os.environ.get("MAIL_HOST")
    smtp_port = int(os.environ.get("MAIL_PORT", 587))
    user = os.environ.get("MAIL_USER")
    password = os.environ.get("MAIL_PASS")
    from_email = os.environ.get("MAIL_FROM", user or "")
    to_email = os.environ.get("MAIL_TO")

    if not smtp_server or not to_email:
        log.warning("MAIL_HOST or MAIL_TO not set; skipping notification email")
        return False

    msg = MIMEMultipart("alternative")
    msg["Subject"] = message.subject
    msg["From"] = from_email
    msg["To"] = to_email
    msg.attach(MIMEText(message.body, "plain"))
    msg.attach(MIMEText(_html_part(message, datetime.now()), "html"))

    try:
        with smtplib.SMTP(smtp_server, smtp_port) as server:
            server.starttls()
            if user and password:
                server.login(user, password)
            server.sendmail(from_email, [to_email], msg.as_string())
        log.info(f"Email sent successfully to {to_email}: {message.subject}")
        return True
    except (smtplib.SMTPException, OSError) as e:
        log.error(f"Error sending email: {str(e)}")
        return False
