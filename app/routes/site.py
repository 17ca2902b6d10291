from flask import Blueprint, request, jsonify

from app.errors import NotFound
from app.extensions import db
from app.models import BlogPost, SitePage
from app.helpers.seo import analyze_page
from app.helpers.session import current_viewer, require_admin
from app.helpers.site import (
    add_block, create_page, create_post, delete_block, delete_page, delete_post,
    get_block_or_404, get_page_or_404, published_page_by_slug, published_posts,
    reorder_blocks, set_page_published, set_post_published, update_block, update_page,
    update_post,
)


site_bp = Blueprint("site", __name__)


def _page_with_blocks(page, blocks=None) -> dict:
    out = page.to_dict()
    out["blocks"] = [b.to_dict() for b in (page.blocks if blocks is None else blocks)]
    return out

def _get_post_or_404(post_id: int) -> BlogPost:
    post = db.session.get(BlogPost, post_id)
    if not post:
        raise NotFound("Post not found.")
    return post

# --- Admin: pages ---

@site_bp.route("/api/site/pages")
def pages():
    viewer = current_viewer()
    require_admin(viewer)
    rows = SitePage.query.order_by(SitePage.slug.asc()).all()
    return jsonify({"ok": True, "pages": [p.to_dict() for p in rows]})

@site_bp.route("/api/site/pages", methods=["POST"])
def new_page():
    viewer = current_viewer()
    data = request.get_json(force=True, silent=True) or {}
    page = create_page(viewer, data)
    return jsonify({"ok": True, "page": _page_with_blocks(page)}), 201

@site_bp.route("/api/site/pages/<int:page_id>")
def page_detail(page_id):
    viewer = current_viewer()
    require_admin(viewer)
    return jsonify({"ok": True, "page": _page_with_blocks(get_page_or_404(page_id))})

@site_bp.route("/api/site/pages/<int:page_id>", methods=["PATCH"])
def edit_page(page_id):
    viewer = current_viewer()
    data = request.get_json(force=True, silent=True) or {}
    page = update_page(viewer, get_page_or_404(page_id), data)
    return jsonify({"ok": True, "page": page.to_dict()})

@site_bp.route("/api/site/pages/<int:page_id>", methods=["DELETE"])
def remove_page(page_id):
    viewer = current_viewer()
    delete_page(viewer, get_page_or_404(page_id))
    return jsonify({"ok": True})

@site_bp.route("/api/site/pages/<int:page_id>/publish", methods=["POST"])
def publish_page(page_id):
    viewer = current_viewer()
    data = request.get_json(force=True, silent=True) or {}
    page = set_page_published(viewer, get_page_or_404(page_id), bool(data.get("published", True)))
    return jsonify({"ok": True, "page": page.to_dict()})

@site_bp.route("/api/site/pages/<int:page_id>/seo")
def page_seo(page_id):
    viewer = current_viewer()
    require_admin(viewer)
    page = get_page_or_404(page_id)
    return jsonify({"ok": True, "analysis": analyze_page(page)})

# --- Admin: blocks ---

@site_bp.route("/api/site/pages/<int:page_id>/blocks", methods=["POST"])
def new_block(page_id):
    viewer = current_viewer()
    data = request.get_json(force=True, silent=True) or {}
    block = add_block(viewer, get_page_or_404(page_id), data)
    return jsonify({"ok": True, "block": block.to_dict()}), 201

@site_bp.route("/api/site/pages/<int:page_id>/blocks/order", methods=["POST"])
def order_blocks(page_id):
    viewer = current_viewer()
    data = request.get_json(force=True, silent=True) or {}
    blocks = reorder_blocks(viewer, get_page_or_404(page_id), data.get("block_ids"))
    return jsonify({"ok": True, "blocks": [b.to_dict() for b in blocks]})

@site_bp.route("/api/site/blocks/<int:block_id>", methods=["PATCH"])
def edit_block(block_id):
    viewer = current_viewer()
    data = request.get_json(force=True, silent=True) or {}
    block = update_block(viewer, get_block_or_404(block_id), data)
    return jsonify({"ok": True, "block": block.to_dict()})

@site_bp.route("/api/site/blocks/<int:block_id>", methods=["DELETE"])
def remove_block(block_id):
    viewer = current_viewer()
    delete_block(viewer, get_block_or_404(block_id))
    return jsonify({"ok": True})

# --- Public ---

@site_bp.route("/api/pages/", defaults={"slug": "/"})
@site_bp.route("/api/pages/<path:slug>")
def public_page(slug):
    page, blocks = published_page_by_slug(slug)
    return jsonify({"ok": True, "page": _page_with_blocks(page, blocks)})

# --- Blog ---

@site_bp.route("/api/blog")
def blog():
    tag = (request.args.get("tag") or "").strip() or None
    rows = published_posts(tag=tag, limit=request.args.get("limit", 20, type=int))
    return jsonify({"ok": True, "posts": [p.to_dict() for p in rows]})

@site_bp.route("/api/blog/<slug>")
def blog_post(slug):
    post = BlogPost.query.filter_by(slug=slug, status="published").first()
    if not post:
        raise NotFound("Post not found.")
    return jsonify({"ok": True, "post": post.to_dict()})

@site_bp.route("/api/blog", methods=["POST"])
def new_post():
    viewer = current_viewer()
    data = request.get_json(force=True, silent=True) or {}
    post = create_post(viewer, data)
    return jsonify({"ok": True, "post": post.to_dict()}), 201

@site_bp.route("/api/blog/posts/<int:post_id>", methods=["PATCH"])
def edit_post(post_id):
    viewer = current_viewer()
    data = request.get_json(force=True, silent=True) or {}
    post = update_post(viewer, _get_post_or_404(post_id), data)
    return jsonify({"ok": True, "post": post.to_dict()})

@site_bp.route("/api/blog/posts/<int:post_id>/publish", methods=["POST"])
def publish_post(post_id):
    viewer = current_viewer()
    data = request.get_json(force=True, silent=True) or {}
    post = set_post_published(viewer, _get_post_or_404(post_id), bool(data.get("published", True)))
    return jsonify({"ok": True, "post": post.to_dict()})

@site_bp.route("/api/blog/posts/<int:post_id>", methods=["DELETE"])
def remove_post(post_id):
    viewer = current_viewer()
    delete_post(viewer, _get_post_or_404(post_id))
    return jsonify({"ok": True})
