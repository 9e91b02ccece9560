from __future__ import annotations

from typing import Any, Optional

import requests


def shisa_post(
    url: str,
    api_key: str,
    *,
    timeout_sec: float,
    json_body: Optional[dict[str, Any]] = None,
    files: Optional[dict[str, Any]] = None,
    data: Optional[dict[str, Any]] = None,
) -> requests.Response:
    headers = {"Authorization": f"Bearer {api_key}"}
    return requests.post(
        url,
        headers=headers,
        json=json_body,
        files=files,
        data=data,
        timeout=timeout_sec,
    )


def error_detail(response: requests.Response) -> str:
    text = (response.text or "").replace("\n", " ").strip()
    if len(text) > 200:
        text = text[:200] + "…"
    return f"{response.status_code} {response.reason or ''}".strip() + (f": {text}" if text else "")
