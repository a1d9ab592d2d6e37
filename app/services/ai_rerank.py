"""Optional language-model re-rank of the engine's short list.

The model may reorder items and supply a one-line reason per item. It can
never add or drop items: unknown ids are ignored and anything it leaves out
is appended in the engine's order. Any failure returns the engine's order
untouched together with an error string.
"""

import json
import logging

import requests

from recommender.history import game_key

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.openai.com/v1"
DEFAULT_MODEL = "gpt-4o-mini"
REQUEST_TIMEOUT_SEC = 20
MAX_REASON_LEN = 70
HISTORY_SUMMARY_LIMIT = 20
FALLBACK_REASON = "Fits your history and current filters"

SYSTEM_PROMPT = (
    "You rank video game recommendations. Order the candidates for this user and "
    "give each a short one-line reason. Reply with JSON only."
)


def summarize_interactions(interactions, limit=HISTORY_SUMMARY_LIMIT):
    counts = {}
    for row in interactions or []:
        title = row.get("game_title_snapshot")
        action = row.get("action")
        if not title or action == "shown":
            continue
        key = (action, title)
        counts[key] = counts.get(key, 0) + 1
    summary = [{"action": action, "title": title, "count": count} for (action, title), count in counts.items()]
    summary.sort(key=lambda item: item["count"], reverse=True)
    return summary[:limit]


def sanitize_reason(value):
    text = str(value or "").strip()
    if not text:
        return FALLBACK_REASON
    return text[:MAX_REASON_LEN] + "…" if len(text) > MAX_REASON_LEN else text


def candidate_ids(items):
    """Prompt ids for items: the "source:id" key, or "#<index>" when it is missing or repeated."""
    ids = []
    for index, item in enumerate(items):
        key = item.get("key") or game_key(item.get("game") or {})
        if key is None or key in ids:
            key = f"#{index}"
        ids.append(key)
    return ids


def _candidate_payload(item, candidate_id):
    game = item.get("game") or {}
    return {
        "id": candidate_id,
        "title": game.get("title"),
        "platform": game.get("platform"),
        "genres": game.get("genre_tags") or [],
        "rating": game.get("rating"),
        "released": (game.get("released") or "")[:10],
    }


def build_messages(items, moods, platforms, genres, interactions):
    user_payload = {
        "task": "Reorder the candidate ids without duplicates",
        "output_schema": {"ranked": [{"id": "candidate_id", "reason": "one line"}]},
        "context": {
            "mood_presets": list(moods or []),
            "platform_filters": list(platforms or []),
            "genre_filters": list(genres or []),
            "history_summary": summarize_interactions(interactions),
        },
        "candidates": [_candidate_payload(item, cid) for item, cid in zip(items, candidate_ids(items))],
    }
    return [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": json.dumps(user_payload, ensure_ascii=False)},
    ]


def apply_ranking(items, ranked_entries):
    """Reorder items by the model's ids; returns (ordered_items, reasons_by_id).

    Ids come from ``candidate_ids`` so every item stays addressable, even
    without a key.
    """
    by_id = dict(zip(candidate_ids(items), items))
    order = []
    reasons = {}
    for entry in ranked_entries or []:
        if not isinstance(entry, dict):
            continue
        cid = entry.get("id")
        if not isinstance(cid, str) or cid not in by_id or cid in order:
            continue
        order.append(cid)
        if isinstance(entry.get("reason"), str):
            reasons[cid] = sanitize_reason(entry["reason"])
    for cid in by_id:
        if cid not in order:
            order.append(cid)
    return [by_id[cid] for cid in order], reasons


def rerank_with_ai(items, moods=None, platforms=None, genres=None, interactions=None, api_key=None, model=DEFAULT_MODEL, base_url=DEFAULT_BASE_URL, session=None):
    """Return (ordered_items, reasons_by_id, error)."""
    items = list(items or [])
    if not (api_key or "").strip():
        return items, {}, "OPENAI_API_KEY is not set; kept the built-in ranking"
    if not items:
        return [], {}, None

    http = session or requests
    payload = {
        "model": model,
        "temperature": 0.2,
        "response_format": {"type": "json_object"},
        "messages": build_messages(items, moods, platforms, genres, interactions),
    }
    try:
        response = http.post(
            f"{base_url.rstrip('/')}/chat/completions",
            headers={"Authorization": f"Bearer {api_key.strip()}", "Content-Type": "application/json"},
            json=payload,
            timeout=REQUEST_TIMEOUT_SEC,
        )
        if response.status_code != 200:
            logger.warning("ai re-rank failed with status %s", response.status_code)
            return items, {}, f"AI re-rank failed ({response.status_code}); kept the built-in ranking"
        data = response.json()
        content = ((data.get("choices") or [{}])[0].get("message") or {}).get("content")
        if not content:
            return items, {}, "AI response was empty; kept the built-in ranking"
        parsed = json.loads(content)
    except (requests.RequestException, ValueError, AttributeError, IndexError) as exc:
        logger.warning("ai re-rank error: %s", exc)
        return items, {}, "AI re-rank raised an error; kept the built-in ranking"

    ranked_entries = parsed.get("ranked") if isinstance(parsed, dict) else None
    ordered, reasons = apply_ranking(items, ranked_entries)
    return ordered, reasons, None
