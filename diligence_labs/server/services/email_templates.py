"""
Email Templates.

Each function renders one transactional email as an ``EmailTemplate`` with
a subject, an HTML body and a plain-text body. Every user-provided value is
HTML-escaped before it is placed in the HTML body.
"""

from html import escape
from typing import NamedTuple, Optional

BRAND = "Diligence Labs"
SUPPORT_EMAIL = "support@diligencelabs.xyz"

STATUS_COLORS = {
    "ACTIVE": "#10b981",
    "TRIALING": "#3b82f6",
    "PAST_DUE": "#f59e0b",
    "CANCELED": "#ef4444",
    "SUSPENDED": "#f59e0b",
    "RESTRICTED": "#f97316",
    "DISABLED": "#ef4444",
}
DEFAULT_COLOR = "#6b7280"

ACCOUNT_STATUS_MESSAGES = {
    "ACTIVE": "Your account is active. You have full access to all Diligence Labs services.",
    "SUSPENDED": (
        "Your account has been temporarily suspended. You will not be able to sign in until it is reactivated."
    ),
    "RESTRICTED": "Your account has been restricted. Some features are unavailable until the restriction is lifted.",
    "DISABLED": "Your account has been disabled. Please contact support if you believe this is a mistake.",
}


class EmailTemplate(NamedTuple):
    subject: str
    html: str
    text: str


def _layout(title: str, body: str, color: str = "#10b981") -> str:
    return (
        "<!DOCTYPE html><html><head><meta charset=\"utf-8\">"
        f"<title>{escape(title)}</title></head>"
        "<body style=\"font-family: -apple-system, 'Segoe UI', Roboto, sans-serif; background: #f8fafc; margin: 0;\">"
        "<div style=\"max-width: 600px; margin: 0 auto; background: #ffffff;\">"
        f"<div style=\"background: {color}; padding: 32px; text-align: center; color: #ffffff;\">"
        f"<div style=\"font-size: 26px; font-weight: 600;\">{BRAND}</div>"
        "<div>Blockchain Consulting &amp; Advisory</div></div>"
        f"<div style=\"padding: 32px; color: #475569; line-height: 1.6;\">{body}</div>"
        "<div style=\"background: #f1f5f9; padding: 24px; text-align: center; font-size: 13px; color: #64748b;\">"
        f"Questions? Contact <a href=\"mailto:{SUPPORT_EMAIL}\">{SUPPORT_EMAIL}</a><br>"
        f"&copy; {BRAND}. All rights reserved.</div>"
        "</div></body></html>"
    )


def _button(url: str, label: str, color: str = "#10b981") -> str:
    return (
        f"<p style=\"text-align: center;\"><a href=\"{escape(url, quote=True)}\" "
        f"style=\"display: inline-block; padding: 14px 32px; background: {color}; color: #ffffff; "
        f"text-decoration: none; border-radius: 8px; font-weight: 600;\">{escape(label)}</a></p>"
    )


def _paragraphs(text: str) -> str:
    return "".join(f"<p>{escape(line)}</p>" for line in text.splitlines() if line.strip())


def email_verification(verification_url: str, user_name: str = "User") -> EmailTemplate:
    subject = f"Verify your email address - {BRAND}"
    body = (
        f"<h1>Welcome to {BRAND}, {escape(user_name)}!</h1>"
        "<p>Thank you for registering. Please verify your email address to complete your registration.</p>"
        + _button(verification_url, "Verify Email Address")
        + "<p>This link expires in 24 hours. If you did not create an account, you can ignore this email.</p>"
    )
    text = (
        f"Welcome to {BRAND}, {user_name}!\n\n"
        "Please verify your email address by opening the link below:\n"
        f"{verification_url}\n\n"
        "This link expires in 24 hours."
    )
    return EmailTemplate(subject, _layout(subject, body), text)


def password_reset(reset_url: str, user_name: str = "User") -> EmailTemplate:
    subject = f"Reset Your Password - {BRAND}"
    body = (
        f"<h1>Hello {escape(user_name)},</h1>"
        "<p>We received a request to reset your password. Use the button below to choose a new one.</p>"
        + _button(reset_url, "Reset Password", "#3b82f6")
        + "<p>This link expires in 1 hour. If you did not request a reset, you can ignore this email.</p>"
    )
    text = (
        f"Hello {user_name},\n\n"
        "Reset your password using the link below:\n"
        f"{reset_url}\n\n"
        "This link expires in 1 hour."
    )
    return EmailTemplate(subject, _layout(subject, body, "#3b82f6"), text)


def account_status(user_name: str, new_status: str, reason: Optional[str] = None) -> EmailTemplate:
    subject = f"Account Status Update - {BRAND}"
    color = STATUS_COLORS.get(new_status, DEFAULT_COLOR)
    explanation = ACCOUNT_STATUS_MESSAGES.get(new_status, "Your account status has changed.")
    body = (
        f"<h1>Hello {escape(user_name)},</h1>"
        f"<p>Your account status is now <strong style=\"color: {color};\">{escape(new_status)}</strong>.</p>"
        f"<p>{escape(explanation)}</p>"
    )
    text = f"Hello {user_name},\n\nYour account status is now {new_status}.\n{explanation}"
    if reason:
        body += f"<p><strong>Reason:</strong> {escape(reason)}</p>"
        text += f"\n\nReason: {reason}"
    return EmailTemplate(subject, _layout(subject, body, color), text)


def account_invitation(create_account_url: str, consultation_type: str, is_free: bool = False) -> EmailTemplate:
    if is_free:
        subject = f"Free Consultation Confirmed - Create Your Account | {BRAND}"
        headline = "Your Free Consultation is Confirmed!"
        color = "#10b981"
    else:
        subject = f"Create Your Account - {BRAND}"
        headline = "Thank you for your consultation booking!"
        color = "#3b82f6"
    label = consultation_type.replace("_", " ").title()
    body = (
        f"<h1>{headline}</h1>"
        f"<p>We received your <strong>{escape(label)}</strong> booking. "
        "Create an account to track your session, receive updates and access your reports.</p>"
        + _button(create_account_url, "Create Your Account", color)
        + "<p>This invitation expires in 7 days.</p>"
    )
    text = (
        f"{headline}\n\n"
        f"We received your {label} booking. Create your account here:\n"
        f"{create_account_url}\n\n"
        "This invitation expires in 7 days."
    )
    return EmailTemplate(subject, _layout(subject, body, color), text)


def expert_approval(expert_name: str, tier: str, reputation_points: int, dashboard_url: str) -> EmailTemplate:
    subject = f"Welcome to {BRAND} - Expert Application Approved!"
    body = (
        f"<h1>Congratulations, {escape(expert_name)}!</h1>"
        "<p>Your expert application has been approved. You can now pick up project evaluations.</p>"
        f"<p><strong>Starting tier:</strong> {escape(tier)}<br>"
        f"<strong>Reputation points:</strong> {reputation_points}</p>"
        + _button(dashboard_url, "Go to Expert Dashboard")
    )
    text = (
        f"Congratulations, {expert_name}!\n\n"
        "Your expert application has been approved.\n"
        f"Starting tier: {tier}\nReputation points: {reputation_points}\n\n"
        f"Expert dashboard: {dashboard_url}"
    )
    return EmailTemplate(subject, _layout(subject, body), text)


def expert_rejection(expert_name: str, review_notes: Optional[str], reapply_url: str) -> EmailTemplate:
    subject = f"Update on Your {BRAND} Expert Application"
    notes = review_notes or "No additional feedback was provided."
    body = (
        f"<h1>Hello {escape(expert_name)},</h1>"
        "<p>Thank you for applying to join our expert network. After careful review, "
        "we are unable to approve your application at this time.</p>"
        f"<p><strong>Reviewer feedback:</strong></p>{_paragraphs(notes)}"
        "<p>You are welcome to update your profile and apply again.</p>"
        + _button(reapply_url, "Update Your Profile", "#6b7280")
    )
    text = (
        f"Hello {expert_name},\n\n"
        "We are unable to approve your expert application at this time.\n\n"
        f"Reviewer feedback:\n{notes}\n\n"
        f"Update your profile: {reapply_url}"
    )
    return EmailTemplate(subject, _layout(subject, body, "#6b7280"), text)


def subscription_status(
    user_name: str, status: str, details: str, action_required: Optional[str] = None
) -> EmailTemplate:
    subject = f"Subscription Status Update - {status} | {BRAND}"
    color = STATUS_COLORS.get(status, DEFAULT_COLOR)
    body = (
        f"<h1>Hello {escape(user_name)},</h1>"
        f"<p>Your subscription status: <strong style=\"color: {color};\">{escape(status)}</strong></p>"
        + _paragraphs(details)
    )
    text = f"Hello {user_name},\n\nYour subscription status: {status}\n\n{details}"
    if action_required:
        body += f"<p><strong>Action required:</strong> {escape(action_required)}</p>"
        text += f"\n\nAction required: {action_required}"
    return EmailTemplate(subject, _layout(subject, body, color), text)


def security_alert(
    user_name: str,
    activity_type: str,
    details: str,
    ip_address: Optional[str] = None,
    timestamp: Optional[str] = None,
) -> EmailTemplate:
    subject = f"Security Alert: Suspicious Activity Detected | {BRAND}"
    body = (
        f"<h1>Hello {escape(user_name)},</h1>"
        f"<p>We detected suspicious activity on your account: <strong>{escape(activity_type)}</strong></p>"
        + _paragraphs(details)
    )
    text = f"Hello {user_name},\n\nWe detected suspicious activity on your account: {activity_type}\n\n{details}"
    if ip_address:
        body += f"<p><strong>IP address:</strong> {escape(ip_address)}</p>"
        text += f"\nIP address: {ip_address}"
    if timestamp:
        body += f"<p><strong>Time:</strong> {escape(timestamp)}</p>"
        text += f"\nTime: {timestamp}"
    body += "<p>If this was not you, reset your password immediately and contact support.</p>"
    text += "\n\nIf this was not you, reset your password immediately and contact support."
    return EmailTemplate(subject, _layout(subject, body, "#ef4444"), text)


def expiration_urgency(days_remaining: int) -> str:
    if days_remaining <= 3:
        return "URGENT"
    if days_remaining <= 7:
        return "Important"
    return "Reminder"


def subscription_expiration(
    user_name: str, plan_name: str, expiration_date: str, days_remaining: int, renew_url: str
) -> EmailTemplate:
    urgency = expiration_urgency(days_remaining)
    color = {"URGENT": "#ef4444", "Important": "#f59e0b"}.get(urgency, "#10b981")
    subject = f"{urgency}: Your {plan_name} subscription expires in {days_remaining} days | {BRAND}"
    body = (
        f"<h1>{urgency}: Subscription Expiring Soon</h1>"
        f"<p>Hello {escape(user_name)},</p>"
        f"<p>Your <strong>{escape(plan_name)}</strong> subscription expires on "
        f"<strong>{escape(expiration_date)}</strong> ({days_remaining} days remaining).</p>"
        "<p>Renew now to avoid any interruption in service.</p>"
        + _button(renew_url, "Renew Subscription", color)
    )
    text = (
        f"{urgency}: Subscription Expiring Soon\n\n"
        f"Hello {user_name},\n\n"
        f"Your {plan_name} subscription expires on {expiration_date} ({days_remaining} days remaining).\n"
        f"Renew here: {renew_url}"
    )
    return EmailTemplate(subject, _layout(subject, body, color), text)


def custom(user_name: str, subject: str, message: str) -> EmailTemplate:
    full_subject = f"{subject} | {BRAND}"
    body = f"<h1>Hello {escape(user_name)},</h1>{_paragraphs(message)}"
    text = f"Hello {user_name},\n\n{message}"
    return EmailTemplate(full_subject, _layout(full_subject, body), text)


def contact_submission(name: str, email: str, message: str, subject: Optional[str] = None) -> EmailTemplate:
    topic = subject or "General inquiry"
    full_subject = f"Contact Form: {topic}"
    body = (
        "<h1>New contact form submission</h1>"
        f"<p><strong>Name:</strong> {escape(name)}<br>"
        f"<strong>Email:</strong> {escape(email)}<br>"
        f"<strong>Subject:</strong> {escape(topic)}</p>"
        f"<p><strong>Message:</strong></p>{_paragraphs(message)}"
    )
    text = f"New contact form submission\n\nName: {name}\nEmail: {email}\nSubject: {topic}\n\nMessage:\n{message}"
    return EmailTemplate(full_subject, _layout(full_subject, body, "#1e293b"), text)
