"""Feed JSON API used by the dashboard script."""

from __future__ import annotations

import logging

from flask import Blueprint, jsonify, request
from pydantic import ValidationError

from community.core.runtime import current_runtime
from community.core.utils.decorators import csrf_protected, session_required
from community.domains.posts.mappers import map_post
from community.domains.posts.schemas import AssistResponse, PostCreateRequest
from community.domains.posts.store import DocumentStoreError

logger = logging.getLogger(__name__)

feed_api_bp = Blueprint("feed_api", __name__)


@feed_api_bp.get("/posts")
@session_required
def list_posts():
    runtime = current_runtime()
    runtime.view_feed()
    feed = runtime.feed
    version = feed.version
    since = request.args.get("since", type=int)
    if since is not None and since == version:
        return jsonify({"ok": True, "version": version, "changed": False})
    posts = feed.posts
    return jsonify(
        {
            "ok": True,
            "version": version,
            "changed": True,
            "items": [map_post(p) for p in posts],
            "total": len(posts),
        }
    )


@feed_api_bp.post("/posts")
@session_required
@csrf_protected
def create_post():
    payload = request.get_json(silent=True) or {}
    try:
        data = PostCreateRequest.model_validate(payload)
    except ValidationError as exc:
        return jsonify({"ok": False, "error": "validation_error", "details": exc.errors()}), 400
    runtime = current_runtime()
    runtime.composer.update(title=data.title, content=data.content)
    if runtime.composer.busy:
        return jsonify({"ok": False, "error": "assist_in_progress"}), 409
    try:
        post_id = runtime.composer.submit(runtime.feed, runtime.author_label)
    except ValueError:
        return jsonify({"ok": False, "error": "validation_error"}), 400
    except DocumentStoreError:
        logger.exception("Error adding post")
        return jsonify({"ok": False, "error": "store_unavailable"}), 502
    return jsonify({"ok": True, "id": post_id}), 201


@feed_api_bp.delete("/posts/<post_id>")
@session_required
@csrf_protected
def delete_post(post_id: str):
    feed = current_runtime().feed
    try:
        issued = feed.delete(post_id, confirm=lambda: request.args.get("confirm") == "true")
    except DocumentStoreError:
        logger.exception("Error deleting post %s", post_id)
        return jsonify({"ok": False, "error": "store_unavailable"}), 502
    if not issued:
        return jsonify({"ok": False, "error": "confirmation_required"}), 400
    return jsonify({"ok": True})


@feed_api_bp.post("/compose/assist")
@session_required
@csrf_protected
def assist():
    composer = current_runtime().composer
    result = composer.ai_assist()
    if result is None:
        return jsonify({"ok": False, "error": "assist_in_progress"}), 409
    body = AssistResponse(
        title=result.title,
        content=result.content,
        fallback=result.fallback,
        error=result.error,
    ).model_dump()
    return jsonify({"ok": True, **body})


@feed_api_bp.post("/feed/deactivate")
@csrf_protected
def deactivate_feed():
    """Sent by the dashboard as it unloads; the next view or poll reopens the feed."""
    current_runtime().release_feed()
    return jsonify({"ok": True})
