"""
Gallery Page Rendering

Static pages and the Jinja2 template for gallery listings. Every <img>
points back at this proxy so the browser's follow-up requests go through
the image cache.
"""

from typing import Iterable

from jinja2 import Environment, StrictUndefined, TemplateError as JinjaTemplateError

from .errors import TemplateError

NO_IMAGE_HTML = """
<!DOCTYPE HTML>
<html>
	<head><title>imgurproxy</title></head>
	<body><h1>Append an imgur image or gallery URL path to the URL.</h1></body>
</html>
"""

GALLERY_HTML = """
<!DOCTYPE html PUBLIC "-//W3C//DTD HTML 4.01//EN"
   "http://www.w3.org/TR/html4/strict.dtd">

<html lang="en">
<head>
	<meta http-equiv="Content-Type" content="text/html; charset=utf-8">
	<title>imgurproxy</title>
</head>
<body>
{% for image in images %}
	<img src="{{ prefix }}{{ image }}" alt="{{ image }}" height="800" width="600">
{% endfor %}
</body>
</html>
"""

_jinja = Environment(undefined=StrictUndefined, autoescape=True)
gallery_template = _jinja.from_string(GALLERY_HTML)


def render_gallery(gallery_id: str, prefix: str, images: Iterable[str]) -> str:
    """
    Render the gallery page, one <img> per reference in sorted order.

    Raises:
        TemplateError: rendering failed
    """
    try:
        return gallery_template.render(prefix=prefix, images=sorted(images))
    except JinjaTemplateError as e:
        raise TemplateError(gallery_id, e) from e
