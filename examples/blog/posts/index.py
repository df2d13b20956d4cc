"""Posts — the full action vocabulary over an in-memory store."""

from chirp import Redirect, Request
from chirp.context import g

from autoroute import view
from autoroute.middleware import request_data

POSTS: dict[int, str] = {1: "Hello, world"}

middleware = [request_data]


def index(request: Request):
    return view(request, title="Posts", posts=sorted(POSTS.items()))


def create(request: Request):
    post_id = max(POSTS, default=0) + 1
    POSTS[post_id] = g.data.get("title", "Untitled")
    return Redirect(f"/posts/{post_id}")


def select(request: Request, id: int):
    return view(request, "/posts/show", title=POSTS.get(id, "Missing"))


def edit(request: Request, id: int):
    return view(request, "/posts/edit", title=POSTS.get(id, ""))


def save(request: Request, id: int):
    POSTS[id] = g.data.get("title", POSTS.get(id, ""))
    return Redirect(f"/posts/{id}")


def delete(request: Request, id: int):
    POSTS.pop(id, None)
    return Redirect("/posts")
