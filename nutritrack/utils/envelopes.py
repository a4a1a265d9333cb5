"""Response envelopes shared by every route: ``{success, data, error}``."""

from typing import Any, Dict, Optional, Sequence


def api_success(data: Any) -> Dict[str, Any]:
	return {"success": True, "data": data, "error": None}


def api_page(items: Sequence[Any], page: int, size: int, total: int) -> Dict[str, Any]:
	"""Success envelope for one page of a zero-indexed listing."""
	return api_success({"items": list(items), "page": page, "size": size, "total": total})


def api_error(code: str, message: str, details: Optional[Any] = None) -> Dict[str, Any]:
	body: Dict[str, Any] = {"code": code, "message": message}
	if details is not None:
		body["details"] = details
	return {"success": False, "data": None, "error": body}
