"""
Destination selection and the interstitial redirect page.

The visitor sees the loading image for a short delay, then navigates to
the mobile or desktop destination picked from the User-Agent.
"""

import html
import json
import re
from typing import Any, Dict, Optional

MOBILE_UA = re.compile(r"Android|webOS|iPhone|iPad|iPod|BlackBerry|IEMobile|Opera Mini", re.IGNORECASE)


def is_mobile(user_agent: Optional[str]) -> bool:
    return bool(user_agent) and MOBILE_UA.search(user_agent) is not None


def pick_target(entry: Dict[str, Any], user_agent: Optional[str]) -> str:
    """Mobile visitors get urlMobile; others get urlDesktop, falling back to urlMobile."""
    url_mobile = entry.get("urlMobile") or ""
    if is_mobile(user_agent):
        return url_mobile
    return entry.get("urlDesktop") or url_mobile


_PAGE = """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<meta name="viewport" content="width=device-width, initial-scale=1">
<meta http-equiv="refresh" content="{refresh_s};url={target_attr}">
<title>Redirecting…</title>
<style>
  body {{ margin: 0; min-height: 100vh; display: flex; align-items: center; justify-content: center; }}
  img {{ width: 100%; max-width: 800px; }}
</style>
</head>
<body>
<img src="{image_attr}" alt="Loading">
<script>setTimeout(function () {{ window.location.href = {target_js}; }}, {delay_ms});</script>
</body>
</html>
"""


def render_redirect_page(entry: Dict[str, Any], target: str, delay_ms: int) -> str:
    """
    Render the interstitial page.

    The meta refresh is the no-JavaScript fallback; the script honours the
    exact millisecond delay.
    """
    # "</" cannot appear inside the inline script
    target_js = json.dumps(target).replace("</", "<\\/")
    return _PAGE.format(
        refresh_s=max(1, round(delay_ms / 1000)) if delay_ms else 0,
        target_attr=html.escape(target, quote=True),
        image_attr=html.escape(entry.get("image") or "", quote=True),
        target_js=target_js,
        delay_ms=int(delay_ms),
    )
