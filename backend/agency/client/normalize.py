from typing import Any, Dict


def normalize_collection(response: Any, key: str) -> Dict[str, Any]:
    """Bring the list envelopes the API has used over time into one shape.

    ``[...]`` becomes ``{key: [...], "total": len}``; a mapping that already
    carries ``key`` passes through unchanged; anything else is read as a
    ``{"data": [...], "total": n}`` envelope.
    """
    if isinstance(response, list):
        return {key: response, "total": len(response)}
    if isinstance(response, dict):
        if key in response:
            return response
        return {key: response.get("data") or [], "total": response.get("total") or 0}
    return {key: [], "total": 0}


def unwrap(response: Any) -> Any:
    if isinstance(response, dict) and "data" in response:
        return response["data"]
    return response
