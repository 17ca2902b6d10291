import pytest

from app.errors import ConflictError, NotFound, PermissionDenied, ValidationError
from app.helpers.seo import analyze_page, extract_keywords
from app.helpers.session import Viewer
from app.helpers.site import (
    add_block, create_page, create_post, delete_block, normalize_page_slug,
    published_page_by_slug, published_posts, reorder_blocks, set_page_published,
    set_post_published, update_page,
)


@pytest.mark.parametrize("raw, slug", [
    ("", "/"),
    ("/", "/"),
    ("About Us", "/about-us"),
    ("/events/Spring Open/", "/events/spring-open"),
])
def test_page_slugs(raw, slug):
    assert normalize_page_slug(raw) == slug


def test_pages_need_admin(debate):
    with pytest.raises(PermissionDenied):
        create_page(debate.aff_viewer, {"title": "Home"})


def test_page_slug_must_be_unique(admin):
    create_page(admin, {"title": "About"})
    with pytest.raises(ConflictError):
        create_page(admin, {"title": "About", "slug": "/about"})


def test_blocks_order_and_reorder(admin):
    page = create_page(admin, {"title": "Home", "slug": "/"})
    hero = add_block(admin, page, {"type": "hero", "content": {"title": "Spring Open"}})
    text = add_block(admin, page, {"type": "text", "content": {"body": "Welcome"}})
    image = add_block(admin, page, {"type": "image", "content": {"src": "/a.png", "alt": "Trophy"}})
    assert [b.position for b in (hero, text, image)] == [0, 1, 2]

    with pytest.raises(ValidationError):
        add_block(admin, page, {"type": "carousel"})
    with pytest.raises(ValidationError):
        reorder_blocks(admin, page, [image.id, hero.id])

    reorder_blocks(admin, page, [image.id, hero.id, text.id])
    assert [b.position for b in (image, hero, text)] == [0, 1, 2]

    delete_block(admin, hero)
    assert [b.position for b in (image, text)] == [0, 1]


def test_public_render_hides_drafts_and_hidden_blocks(admin):
    page = create_page(admin, {"title": "Rules"})
    add_block(admin, page, {"type": "heading", "content": {"text": "Rules"}})
    add_block(admin, page, {"type": "text", "content": {"body": "Draft note"}, "visible": False})

    with pytest.raises(NotFound):
        published_page_by_slug("rules")

    set_page_published(admin, page, True)
    found, blocks = published_page_by_slug("rules")
    assert found.id == page.id
    assert [b.type for b in blocks] == ["heading"]


def test_seo_flags_missing_metadata(admin):
    page = create_page(admin, {"title": "Spring Open"})
    report = analyze_page(page)

    fields = {i["field"] for i in report["issues"]}
    assert {"meta_title", "meta_description", "focus_keyword", "content"} <= fields
    assert report["score"] < 50
    assert report["suggestions"][0]["suggested"] == "Spring Open"


def test_seo_rewards_a_complete_page(admin):
    body = " ".join(["Debate tournament rounds judges and teams compete each weekend."] * 20)
    page = create_page(admin, {
        "title": "Debate Tournament",
        "slug": "/debate-tournament",
        "seo": {
            "meta_title": "Debate Tournament Schedule",
            "meta_description": "Everything teams need for the spring debate tournament: rounds, judges, rooms "
                                "and results.",
            "focus_keyword": "debate tournament",
        },
    })
    add_block(admin, page, {"type": "hero", "content": {"title": "Debate Tournament"}})
    add_block(admin, page, {"type": "text", "content": {"body": body}})
    add_block(admin, page, {"type": "image", "content": {"src": "/x.png", "alt": "Finals"}})

    report = analyze_page(page)
    assert report["issues"] == []
    assert report["score"] == 100
    assert report["keywords"][0] == "debate"


def test_keywords_skip_stopwords():
    assert extract_keywords("The judges and the judges and the rooms") == ["judges", "rooms"]


def test_update_page_merges_seo(admin):
    page = create_page(admin, {"title": "About", "seo": {"meta_title": "About us"}})
    update_page(admin, page, {"seo": {"focus_keyword": "debate"}})
    assert page.seo == {"meta_title": "About us", "focus_keyword": "debate"}


def test_admin_blog_posts(admin, make):
    author = Viewer(account_id=make.account().id, is_admin=True)

    post = create_post(author, {"title": "Results are in", "featured": True})
    assert post.slug == "results-are-in"
    assert post.featured
    assert published_posts() == []

    set_post_published(author, post, True)
    assert [p.id for p in published_posts()] == [post.id]

    again = create_post(author, {"title": "Results are in"})
    assert again.slug == "results-are-in-2"


def test_regular_users_cannot_blog(debate):
    with pytest.raises(PermissionDenied):
        create_post(debate.aff_viewer, {"title": "My take"})


# --- HTTP ---

def test_site_routes(client, login, make):
    login(make.account(), admin=True)

    resp = client.post("/api/site/pages", json={"title": "About"})
    assert resp.status_code == 201
    page_id = resp.get_json()["page"]["id"]

    client.post(f"/api/site/pages/{page_id}/blocks", json={"type": "text", "content": {"body": "Hi"}})
    client.post(f"/api/site/pages/{page_id}/publish", json={"published": True})

    resp = client.get(f"/api/site/pages/{page_id}/seo")
    assert 0 <= resp.get_json()["analysis"]["score"] <= 100

    login(admin=False)
    resp = client.get("/api/pages/about")
    assert resp.status_code == 200
    assert [b["type"] for b in resp.get_json()["page"]["blocks"]] == ["text"]

    assert client.get(f"/api/site/pages/{page_id}/seo").status_code == 403
