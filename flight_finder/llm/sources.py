from typing import Any, Dict, Iterable, List, Mapping, Optional

from flight_finder.types import GroundingSource


def citations_from_response(response: Any) -> List[Dict[str, Optional[str]]]:
    """Raw web citations from a Gemini response, in the order given.

    Every level of candidates/grounding_metadata/grounding_chunks/web may be
    missing; absent data just yields fewer records.
    """
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        return []
    metadata = getattr(candidates[0], "grounding_metadata", None)
    chunks = getattr(metadata, "grounding_chunks", None) or []
    citations = []
    for chunk in chunks:
        web = getattr(chunk, "web", None)
        citations.append({
            "uri": getattr(web, "uri", None),
            "title": getattr(web, "title", None),
        })
    return citations


def dedupe_sources(raw: Iterable[Mapping[str, Any]]) -> List[GroundingSource]:
    """One source per uri, first title and first position win."""
    seen: Dict[str, GroundingSource] = {}
    for record in raw or []:
        if not isinstance(record, Mapping):
            continue
        uri, title = record.get("uri"), record.get("title")
        if not (isinstance(uri, str) and uri and isinstance(title, str) and title):
            continue
        if uri not in seen:
            seen[uri] = GroundingSource(uri=uri, title=title)
    return list(seen.values())
