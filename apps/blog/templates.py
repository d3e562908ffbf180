from typing import Iterable

from jinja2 import Environment

from apps.blog.schema import PostOut
from config.settings import DATA_LOCATION

_env = Environment(autoescape=True)

# content is stored already escaped, so it is the one value rendered with |safe
FRONTPAGE_TEMPLATE = """<html>
    <head><title>Blog Posts</title></head>
    <style>
        body { background-color: #cccccc; }
        .blog-post { display: flex; width: 100%; border: 1px solid black; margin-top: 5px; }
        .user-info { flex: 0 0 150px; padding: 10px; background-color: #dddddd; }
        .user-info > img { width: 100%; border: 1px solid black; }
        .post-info { flex: 1; min-height: 200px; padding: 10px; background-color: #eeeeee; box-sizing: border-box; }
        .post-info2 { display: flex; justify-content: space-between; }
        .post-info > * { padding: 5px; }
        .post-info > hr { padding: 0; }
        .post-info > img { padding: 0px; max-width: 100%; }
    </style>
    <body>
        <h1>Blog Posts</h1>
        <form method="POST" action="#" enctype="multipart/form-data">
            <input type="text" name="username" placeholder="Username*" required/><br/>
            <input type="url" name="useravatar" placeholder="User avatar link"/><br/>
            <textarea name="content" placeholder="Post content*" required></textarea><br/>
            <input type="file" name="image"/><br/><br/>
            <button type="submit">Add Post</button>
        </form>
        <div>
        {%- for post in posts %}
            <div class="blog-post" post-order="{{ loop.index }}">
                <div class="user-info">
                    {%- if post.avatar_ref %}<img src="{{ data_location }}/{{ post.avatar_ref }}">{% endif -%}
                    <span>User: {{ post.username }}</span>
                </div>
                <div class="post-info">
                    <div class="post-info2">
                        <span class="post-date" post-date="{{ post.date }}">Posted on: ???</span>
                        <span>#{{ loop.index }}</span>
                    </div>
                    <hr>
                    <p>{{ post.content|safe }}</p>
                    {%- if post.image_ref %}<img src="{{ data_location }}/{{ post.image_ref }}">{% endif %}
                </div>
            </div>
        {%- endfor %}
        </div>
    </body>
    <script>
        window.onload = function() {
            for (e of document.getElementsByClassName("post-date")) {
                let date = new Date(`${e.getAttribute("post-date")}`);
                e.innerText = `Posted on: ${date}`;
            }
        };
    </script>
</html>
"""

_frontpage = _env.from_string(FRONTPAGE_TEMPLATE)


def render_frontpage(posts: Iterable[PostOut]) -> str:
    return _frontpage.render(posts=list(posts), data_location=DATA_LOCATION)
