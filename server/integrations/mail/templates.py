"""Bodies of the emails the server sends."""

PASSWORD_RESET_SUBJECT = "Password Reset OTP"


def password_reset_text(code: str, ttl_minutes: int) -> str:
    return f"Your password reset OTP is {code}. It expires in {ttl_minutes} minutes."


def password_reset_html(code: str, ttl_minutes: int) -> str:
    return (
        '<div style="font-family: Arial, sans-serif; line-height: 1.5;">'
        "<h2>Password Reset</h2>"
        "<p>Your password reset OTP is:</p>"
        f'<p style="font-size: 24px; font-weight: bold; letter-spacing: 4px;">{code}</p>'
        f"<p>This code expires in {ttl_minutes} minutes.</p>"
        "<p>If you did not request a password reset, you can ignore this email.</p>"
        "</div>"
    )
