import logging
import mimetypes
import os
import re
import shutil
import tempfile
import threading
from html.parser import HTMLParser
from urllib.parse import urljoin, urlsplit, urlunsplit

import requests

from kube_porthole.conf import get_config
from kube_porthole.core.errors import IconResolutionError
from kube_porthole.core.types import Icon

logger = logging.getLogger(__name__)

LINK_RELS = ("icon", "shortcut icon", "apple-touch-icon", "apple-touch-icon-precomposed")
META_NAMES = ("msapplication-tileimage", "og:image", "image")
META_NAME_ATTRIBUTES = ("name", "property", "itemprop")

SIZE_SEPARATOR = re.compile("[x\xd7]", re.IGNORECASE)
SIZE_IN_URL = re.compile(r"(?P<width>\d{2,4})x(?P<height>\d{2,4})", re.IGNORECASE)
DIGITS = re.compile("[0-9]+")


class IconTag:
    def __init__(self, tag, attrs):
        self.tag = tag
        self.attrs = attrs

    @property
    def url(self):
        """href takes priority over content, returns None when neither is set"""
        if "href" in self.attrs:
            return self.attrs["href"]
        return self.attrs.get("content")

    def dimensions(self):
        """Best effort icon size from the sizes attribute or the file name, (0, 0) when unknown"""
        sizes = (self.attrs.get("sizes") or "").strip()
        if sizes and sizes.lower() != "any":
            dimensions = [(0, 0)]
            for size in sizes.split():
                parts = SIZE_SEPARATOR.split(size, maxsplit=1)
                if len(parts) == 2:
                    dimensions.append((to_int(parts[0]), to_int(parts[1])))
            return max(dimensions, key=lambda dimension: dimension[0] * dimension[1])

        match = SIZE_IN_URL.search(self.url or "")
        if match:
            return to_int(match.group("width")), to_int(match.group("height"))
        return 0, 0


def to_int(value):
    # repairs bad attribute values e.g. 192x192+
    match = DIGITS.search(value or "")
    return int(match.group()) if match else 0


class IconTagParser(HTMLParser):
    """Collects icon link and meta tags, the base href and the first title of an html document"""

    def __init__(self):
        super().__init__(convert_charrefs=True)
        self.tags = list()
        self.base_href = None
        self.title = None
        self._title_parts = None

    def handle_starttag(self, tag, attrs):
        attrs = {name.lower(): (value or "") for name, value in attrs}
        if tag == "link":
            if attrs.get("rel", "").strip().lower() in LINK_RELS:
                self.tags.append(IconTag(tag, attrs))
        elif tag == "meta":
            for name in META_NAME_ATTRIBUTES:
                if attrs.get(name, "").strip().lower() in META_NAMES:
                    self.tags.append(IconTag(tag, attrs))
                    break
        elif tag == "base":
            if self.base_href is None and attrs.get("href"):
                self.base_href = attrs["href"]
        elif tag == "title":
            if self.title is None and self._title_parts is None:
                self._title_parts = list()

    def handle_data(self, data):
        if self._title_parts is not None:
            self._title_parts.append(data)

    def handle_endtag(self, tag):
        if tag == "title" and self._title_parts is not None:
            self.title = "".join(self._title_parts).strip()
            self._title_parts = None


def favicon_url(url):
    parts = urlsplit(url)
    return urlunsplit((parts.scheme, parts.netloc, "/favicon.ico", "", ""))


class IconResolver:
    """Icon Resolver
    Finds the page title and the largest icon of a website and stores the icon in a local file
    """

    def __init__(self, icon_dir=None, timeout=None, session_factory=requests.Session):
        self.timeout = timeout
        # resolve runs on many orchestrator threads at once, each call gets its own session
        self.session_factory = session_factory
        self._icon_dir = icon_dir
        self._owns_icon_dir = False
        self._lock = threading.Lock()

    @property
    def icon_dir(self):
        with self._lock:
            if self._icon_dir is None:
                self._icon_dir = tempfile.mkdtemp(prefix="kube-porthole-")
                self._owns_icon_dir = True
            return self._icon_dir

    def get_timeout(self):
        return self.timeout if self.timeout is not None else get_config().network_timeout

    def resolve(self, base_url):
        """returns tuple of (icon, page title)

        @raise IconResolutionError: the page could not be fetched or none of its icons could be downloaded
        """
        with self.session_factory() as session:
            try:
                response = session.get(base_url, timeout=self.get_timeout())
            except requests.RequestException as ex:
                raise IconResolutionError(f"Failed getting {base_url}: {ex}") from ex
            if response.status_code >= 400:
                raise IconResolutionError(f"Received bad status code {response.status_code} from {base_url}")

            parser = IconTagParser()
            parser.feed(response.text)
            parser.close()

            icons = list()
            for url, tag in self.candidates(response.url or base_url, parser):
                icon = self.download(session, url, tag)
                if icon:
                    icons.append(icon)

        if not icons:
            raise IconResolutionError(f"Failed to get any icons for {base_url}")
        logger.debug(f"Icon finder got a total of {len(icons)} icons to choose from for {base_url}")

        best = max(icons, key=lambda icon: icon.size)
        for icon in icons:
            if icon is not best:
                self.discard(icon)
        return best, parser.title or ""

    @staticmethod
    def candidates(page_url, parser):
        """yields (absolute url, tag) of every icon to try, starting with the conventional favicon.ico"""
        base_url = urljoin(page_url, parser.base_href) if parser.base_href else page_url
        seen = set()

        default = favicon_url(page_url)
        seen.add(default)
        yield default, None

        logger.debug(f"Got {len(parser.tags)} icon tags for {page_url}")
        for tag in parser.tags:
            url = (tag.url or "").strip()
            if not url or url.lower().startswith("data:"):
                continue
            url = urljoin(base_url, url)
            if url in seen:
                continue
            seen.add(url)
            yield url, tag

    def download(self, session, url, tag=None):
        logger.debug(f"Getting icon from {url}")
        try:
            response = session.get(url, timeout=self.get_timeout())
        except requests.RequestException:
            logger.debug(f"Failed getting icon {url}", exc_info=True)
            return None
        if response.status_code >= 400:
            logger.debug(f"Received bad status code {response.status_code} attempting to retrieve icon at {url}")
            return None

        mime_type = response.headers.get("content-type", "").split(";")[0].strip().lower()
        if not mime_type.startswith("image/"):
            logger.debug(f"Skipping icon {url} with mime type '{mime_type}'")
            return None

        extension = mimetypes.guess_extension(mime_type) or ""
        with tempfile.NamedTemporaryFile(
            prefix="icon-", suffix=extension, dir=self.icon_dir, delete=False
        ) as icon_file:
            icon_file.write(response.content)

        width, height = tag.dimensions() if tag else (0, 0)
        return Icon(
            remote_url=url,
            file_path=icon_file.name,
            size=len(response.content),
            mime_type=mime_type,
            width=width,
            height=height,
        )

    @staticmethod
    def discard(icon):
        try:
            os.remove(icon.file_path)
        except OSError:
            logger.debug(f"Failed removing icon file {icon.file_path}", exc_info=True)

    def cleanup(self):
        """Removes the downloaded icons, when they are stored in a directory created by the resolver"""
        if self._owns_icon_dir and self._icon_dir:
            shutil.rmtree(self._icon_dir, ignore_errors=True)
            self._icon_dir = None
            self._owns_icon_dir = False
