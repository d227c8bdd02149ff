from fastapi import APIRouter
from fastapi.responses import HTMLResponse

router = APIRouter(tags=["pages"], include_in_schema=False)

_PAGE = """<!DOCTYPE html>
<html>
<head>
  <title>{title}</title>
  <style>
    body {{ font-family: Arial, sans-serif; text-align: center; padding: 50px; }}
    .msg {{ color: {color}; font-size: 24px; }}
    .info {{ color: #666; margin-top: 20px; }}
  </style>
</head>
<body>
  <div class="msg">{message}</div>
  <div class="info">{info}</div>
</body>
</html>
"""

@router.get("/success", response_class=HTMLResponse)
def success() -> str:
    return _PAGE.format(
        title="Payment successful",
        color="green",
        message="✅ Payment successful!",
        info="<p>Thank you for your purchase. A receipt is on its way to your inbox.</p>",
    )

@router.get("/cancel", response_class=HTMLResponse)
def cancel() -> str:
    return _PAGE.format(
        title="Payment cancelled",
        color="red",
        message="❌ Payment cancelled",
        info="<p>No charge was made.</p>",
    )
