from __future__ import annotations

from flask import Flask, request

from ..auth.guard import Guards, current_actor
from ..common.http import json_body, json_response
from ..common.pagination import PageRequest
from ..common.validators import optional_str, parse_enum
from ..container import Container
from ..core.enums import PostStatus
from ..core.policy import Action
from ..storage.model import UploadFile
from .model import NewPost, PostFilter


def _post_filter(args) -> PostFilter:
    status = optional_str(args.get("status"))
    return PostFilter(
        package_id=optional_str(args.get("package_id")),
        status=parse_enum(PostStatus, status, "status") if status else None,
        author_id=optional_str(args.get("author_id")),
        search=optional_str(args.get("search")),
    )


def register(app: Flask, container: Container) -> None:
    guards = Guards(container.auth_service)
    blog = container.blog_service

    # -------- Packages --------
    @app.get("/packages", endpoint="packages_list")
    def packages_list():
        return json_response([p.to_dict() for p in blog.list_packages()])

    @app.get("/packages/<package_id>", endpoint="packages_get")
    def packages_get(package_id: str):
        return json_response(blog.get_package(package_id).to_dict())

    @app.get("/packages/slug/<slug>", endpoint="packages_get_by_slug")
    def packages_get_by_slug(slug: str):
        return json_response(blog.get_package_by_slug(slug).to_dict())

    @app.post("/packages", endpoint="packages_create")
    @guards.requires(Action.PACKAGE_MANAGE)
    def packages_create():
        body = json_body()
        pkg = blog.create_package(
            actor=current_actor(),
            name=body.get("name", ""),
            slug=body.get("slug"),
            description=body.get("description"),
        )
        return json_response(pkg.to_dict(), 201)

    @app.put("/packages/<package_id>", endpoint="packages_update")
    @guards.requires(Action.PACKAGE_MANAGE)
    def packages_update(package_id: str):
        pkg = blog.update_package(actor=current_actor(), package_id=package_id, changes=json_body())
        return json_response(pkg.to_dict())

    @app.delete("/packages/<package_id>", endpoint="packages_delete")
    @guards.requires(Action.PACKAGE_MANAGE)
    def packages_delete(package_id: str):
        blog.delete_package(actor=current_actor(), package_id=package_id)
        return json_response({"message": "Package deleted"})

    # -------- Posts --------
    @app.get("/posts", endpoint="posts_list_public")
    def posts_list_public():
        page = blog.list_posts(_post_filter(request.args), PageRequest.from_args(request.args))
        return json_response(page.to_dict(lambda p: p.to_dict()))

    @app.get("/posts/slug/<slug>", endpoint="posts_get_by_slug")
    def posts_get_by_slug(slug: str):
        return json_response(blog.get_post_by_slug(slug).to_dict())

    @app.get("/posts/admin", endpoint="posts_list_admin")
    @guards.requires(Action.POST_READ_ALL)
    def posts_list_admin():
        page = blog.list_posts(_post_filter(request.args), PageRequest.from_args(request.args), actor=current_actor())
        return json_response(page.to_dict(lambda p: p.to_dict()))

    @app.get("/posts/<post_id>", endpoint="posts_get")
    @guards.requires(Action.POST_READ_ALL)
    def posts_get(post_id: str):
        return json_response(blog.get_post(post_id).to_dict())

    @app.post("/posts", endpoint="posts_create")
    @guards.requires(Action.POST_CREATE)
    def posts_create():
        body = json_body()
        post = blog.create_post(
            actor=current_actor(),
            new_post=NewPost(
                title=body.get("title", ""),
                content=body.get("content", ""),
                package_id=body.get("package_id", ""),
                slug=body.get("slug"),
                excerpt=body.get("excerpt"),
                featured_image=body.get("featured_image"),
            ),
        )
        return json_response(post.to_dict(), 201)

    @app.put("/posts/<post_id>", endpoint="posts_update")
    @guards.requires(Action.POST_UPDATE)
    def posts_update(post_id: str):
        post = blog.update_post(actor=current_actor(), post_id=post_id, changes=json_body())
        return json_response(post.to_dict())

    @app.delete("/posts/<post_id>", endpoint="posts_delete")
    @guards.requires(Action.POST_DELETE)
    def posts_delete(post_id: str):
        blog.delete_post(actor=current_actor(), post_id=post_id)
        return json_response({"message": "Post deleted"})

    @app.patch("/posts/<post_id>/publish", endpoint="posts_publish")
    @guards.requires(Action.POST_PUBLISH)
    def posts_publish(post_id: str):
        return json_response(blog.publish_post(actor=current_actor(), post_id=post_id).to_dict())

    @app.patch("/posts/<post_id>/unpublish", endpoint="posts_unpublish")
    @guards.requires(Action.POST_PUBLISH)
    def posts_unpublish(post_id: str):
        return json_response(blog.unpublish_post(actor=current_actor(), post_id=post_id).to_dict())

    @app.post("/posts/upload-image", endpoint="posts_upload_image")
    @guards.requires(Action.POST_UPLOAD_IMAGE)
    def posts_upload_image():
        url = blog.upload_image(actor=current_actor(), file=UploadFile.from_werkzeug(request.files.get("file")))
        return json_response({"url": url}, 201)
