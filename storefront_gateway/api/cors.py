from typing import Dict, Optional


def cors_headers(origin: Optional[str] = None) -> Dict[str, str]:
    """CORS headers echoing the caller's Origin, or * when there is none."""
    return {
        "Access-Control-Allow-Origin": origin or "*",
        "Access-Control-Allow-Methods": "GET,POST,OPTIONS",
        "Access-Control-Allow-Headers": "Content-Type, Authorization, X-Requested-With",
        "Access-Control-Max-Age": "86400",
    }
