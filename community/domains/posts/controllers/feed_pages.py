"""Feed HTML pages: dashboard, compose, delete confirmation."""

from __future__ import annotations

import logging

from flask import Blueprint, current_app, flash, redirect, render_template, request, url_for

from community.core.routing import PROTECTED_ROOT
from community.core.routing.pages import guard_navigation
from community.core.runtime import ClientRuntime
from community.core.utils.decorators import csrf_protected
from community.domains.posts.store import DocumentStoreError

logger = logging.getLogger(__name__)

feed_pages_bp = Blueprint("feed_pages", __name__)

MSG_EMPTY_POST = "Enter a title and some content before posting."
MSG_SAVE_FAILED = "Something went wrong while saving the post."
MSG_DELETE_FAILED = "Something went wrong while deleting the post."
MSG_AI_FAILED = "AI post generation failed."
MSG_AI_BUSY = "The AI is still writing. Please wait a moment."


def _render_dashboard(runtime: ClientRuntime):
    return render_template(
        "posts/dashboard.html",
        posts=runtime.feed.posts,
        feed_version=runtime.feed.version,
        composer=runtime.composer,
        session_user=runtime.auth.current_session,
        poll_interval_ms=current_app.config.get("FEED_POLL_INTERVAL_MS", 3000),
    )


def _back_to_feed():
    return redirect(url_for("feed_pages.dashboard"))


@feed_pages_bp.get(PROTECTED_ROOT)
def dashboard():
    runtime, response = guard_navigation(PROTECTED_ROOT)
    if response is not None:
        return response
    runtime.view_feed()
    return _render_dashboard(runtime)


@feed_pages_bp.post("/posts")
@csrf_protected
def create_post():
    runtime, response = guard_navigation(PROTECTED_ROOT)
    if response is not None:
        return response
    runtime.composer.update(title=request.form.get("title", ""), content=request.form.get("content", ""))
    if runtime.composer.busy:
        flash(MSG_AI_BUSY, "error")
        return _back_to_feed()
    try:
        runtime.composer.submit(runtime.feed, runtime.author_label)
    except ValueError:
        flash(MSG_EMPTY_POST, "error")
    except DocumentStoreError:
        logger.exception("Error adding post")
        flash(MSG_SAVE_FAILED, "error")
    return _back_to_feed()


@feed_pages_bp.get("/posts/<post_id>/delete")
def confirm_delete(post_id: str):
    runtime, response = guard_navigation(PROTECTED_ROOT)
    if response is not None:
        return response
    runtime.view_feed()
    post = next((p for p in runtime.feed.posts if p.id == post_id), None)
    if post is None:
        return _back_to_feed()
    return render_template("posts/confirm_delete.html", post=post)


@feed_pages_bp.post("/posts/<post_id>/delete")
@csrf_protected
def delete_post(post_id: str):
    runtime, response = guard_navigation(PROTECTED_ROOT)
    if response is not None:
        return response
    try:
        runtime.feed.delete(post_id, confirm=lambda: request.form.get("confirm") == "yes")
    except DocumentStoreError:
        logger.exception("Error deleting post %s", post_id)
        flash(MSG_DELETE_FAILED, "error")
    return _back_to_feed()


@feed_pages_bp.post("/compose/assist")
@csrf_protected
def assist():
    runtime, response = guard_navigation(PROTECTED_ROOT)
    if response is not None:
        return response
    runtime.composer.update(title=request.form.get("title"), content=request.form.get("content"))
    result = runtime.composer.ai_assist()
    if result is None:
        flash(MSG_AI_BUSY, "error")
    elif result.fallback:
        flash(MSG_AI_FAILED, "error")
    return _back_to_feed()
