"""
Email service using SendGrid

app/services/email_service.py
"""
import sendgrid
from sendgrid.helpers.mail import Mail, Email, To, Content
from app.core.config import settings
import logging

logger = logging.getLogger(__name__)

class EmailService:
    def __init__(self):
        self.is_configured = bool(settings.SENDGRID_API_KEY)
        if not self.is_configured:
            logger.warning("SendGrid not configured: SENDGRID_API_KEY is empty")
            return
        self.sg = sendgrid.SendGridAPIClient(api_key=settings.SENDGRID_API_KEY)
        self.from_email = Email(settings.SENDGRID_FROM_EMAIL, "Lyrics Admin")

    def invite_link(self, invite_token: str) -> str:
        return f"{settings.FRONTEND_URL}/accept-invite?token={invite_token}"

    async def send_invite_email(self, to_email: str, invite_token: str) -> bool:
        """Send an invitation link; returns False when delivery failed"""
        invite_link = self.invite_link(invite_token)
        logger.info(f"Invite link for {to_email}: {invite_link}")

        if not self.is_configured:
            logger.warning("SendGrid not configured. Use link above for testing.")
            return True

        subject = f"You have been invited to {settings.APP_NAME}"
        html_content = f"""
        <html>
            <body style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
                <h2 style="color: #333;">You're invited</h2>
                <p>An administrator invited you to the {settings.APP_NAME} console.</p>
                <div style="text-align: center; margin: 30px 0;">
                    <a href="{invite_link}"
                       style="background-color: #4F46E5;
                              color: white;
                              padding: 12px 30px;
                              text-decoration: none;
                              border-radius: 5px;
                              display: inline-block;
                              font-weight: bold;">
                        Accept invitation
                    </a>
                </div>
                <p>Or copy and paste this link in your browser:</p>
                <p style="word-break: break-all; color: #666;">{invite_link}</p>
                <p style="color: #999; font-size: 14px;">
                    This link will expire in {settings.INVITE_TOKEN_EXPIRE_HOURS} hours.
                </p>
            </body>
        </html>
        """

        mail = Mail(self.from_email, To(to_email), subject, Content("text/html", html_content))

        try:
            # SendGrid's send method is synchronous
            response = self.sg.send(mail)
            logger.info(f"Invite email sent to {to_email}. Status code: {response.status_code}")
            return True
        except Exception as e:
            logger.error(f"Failed to send invite email: {str(e)}")
            return False

email_service = EmailService()
