"""HTML email templates for IntroBridge notifications."""

from html import escape

from ...platform.brand import BRAND_NAME, BRAND_PRODUCT_NAME


def notification_html(title: str, body: str, action_link: str | None = None) -> str:
    button = ""
    if action_link:
        button = f"""\
              <table cellpadding="0" cellspacing="0" style="margin:0 auto 24px;">
                <tr>
                  <td style="background-color:#0f766e;border-radius:6px;text-align:center;">
                    <a href="{escape(action_link, quote=True)}"
                       style="display:inline-block;padding:14px 32px;color:#ffffff;font-size:16px;font-weight:600;text-decoration:none;">
                      Open in {BRAND_NAME}
                    </a>
                  </td>
                </tr>
              </table>
"""
    return f"""\
<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
</head>
<body style="margin:0;padding:0;background-color:#f4f4f7;font-family:-apple-system,BlinkMacSystemFont,'Segoe UI',Roboto,Helvetica,Arial,sans-serif;">
  <table width="100%" cellpadding="0" cellspacing="0" style="background-color:#f4f4f7;padding:40px 20px;">
    <tr>
      <td align="center">
        <table width="600" cellpadding="0" cellspacing="0" style="background-color:#ffffff;border-radius:8px;overflow:hidden;box-shadow:0 2px 8px rgba(0,0,0,0.08);">
          <tr>
            <td style="background-color:#0f766e;padding:32px 40px;text-align:center;">
              <h1 style="margin:0;color:#ffffff;font-size:28px;font-weight:700;letter-spacing:-0.5px;">{BRAND_NAME}</h1>
              <p style="margin:4px 0 0;color:#ccfbf1;font-size:14px;">{BRAND_PRODUCT_NAME}</p>
            </td>
          </tr>
          <tr>
            <td style="padding:40px;">
              <h2 style="margin:0 0 16px;color:#1f2937;font-size:22px;">{escape(title)}</h2>
              <p style="margin:0 0 24px;color:#4b5563;font-size:16px;line-height:1.6;">{escape(body)}</p>
{button}              <hr style="border:none;border-top:1px solid #e5e7eb;margin:24px 0;">
              <p style="margin:0;color:#9ca3af;font-size:13px;text-align:center;">
                You are receiving this because of activity on your {BRAND_NAME} account.
              </p>
            </td>
          </tr>
        </table>
      </td>
    </tr>
  </table>
</body>
</html>"""
