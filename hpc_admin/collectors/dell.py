"""Dell warranty collector.

Scrapes the Dell support troubleshooting page for the model description
and remaining warranty days of a service tag.
"""

from __future__ import annotations

import re
from typing import Any, Dict, Optional, Tuple

import requests
from bs4 import BeautifulSoup
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry
import urllib3

from .base import BaseCollector, CollectorError

try:
    import certifi
    DEFAULT_CA_BUNDLE = certifi.where()
except Exception:
    DEFAULT_CA_BUNDLE = True


DELL_SUPPORT_URL = "http://www.dell.com/support/troubleshooting/us/en/555/Index?servicetag="

NOT_AVAILABLE = "<N/A>"


class DellWarrantyCollector(BaseCollector):
    """Collector for Dell service tag warranty information."""

    def __init__(
        self,
        url: str = DELL_SUPPORT_URL,
        timeout: int = 20,
        insecure: bool = False,
        ca_bundle: Optional[str] = None,
        user_agent: str = "hpc-admin-tools/1.0",
        debug: bool = False,
    ):
        self.url = url
        self.timeout = timeout
        self.user_agent = user_agent
        self.debug = debug
        self._verify = self._determine_verify(insecure, ca_bundle)
        self._session: Optional[requests.Session] = None

        if self._verify is False:
            urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)

    @property
    def name(self) -> str:
        return "dell"

    def collect(self, service_tag: str) -> Dict[str, Any]:
        """Look up one service tag.

        Returns:
            Dictionary with 'svc_tag', 'model' and 'warranty_exp' keys. The
            placeholder tag ``NA`` short-circuits to ``<N/A>`` values.

        Raises:
            CollectorError: If the page cannot be fetched.
        """
        if service_tag.strip().upper() == "NA":
            return {
                "svc_tag": NOT_AVAILABLE,
                "model": NOT_AVAILABLE,
                "warranty_exp": NOT_AVAILABLE,
            }

        try:
            html = self._fetch_page(service_tag)
        except requests.exceptions.SSLError as e:
            raise CollectorError(
                self.name,
                "TLS/SSL error: certificate verify failed. Consider using --insecure or --ca-bundle.",
                e,
            )
        except requests.exceptions.Timeout as e:
            raise CollectorError(self.name, f"Timeout fetching {service_tag}", e, retryable=True)
        except requests.exceptions.RequestException as e:
            raise CollectorError(self.name, f"Error fetching {service_tag}: {e}", e)

        model, warranty = self._parse_warranty_page(html)
        self.trace(f"{service_tag}: model={model!r} warranty={warranty!r}")
        return {
            "svc_tag": service_tag,
            "model": model,
            "warranty_exp": warranty,
        }

    def _determine_verify(self, insecure: bool, ca_bundle: Optional[str]):
        """Determine SSL verification setting."""
        if insecure:
            return False
        if ca_bundle:
            return ca_bundle
        return DEFAULT_CA_BUNDLE

    def _get_session(self) -> requests.Session:
        """Get or create a requests session with retry configuration."""
        if self._session is None:
            session = requests.Session()
            retry = Retry(
                total=4,
                connect=4,
                read=4,
                backoff_factor=0.5,
                status_forcelist=(429, 500, 502, 503, 504),
                allowed_methods=("GET", "HEAD"),
            )
            adapter = HTTPAdapter(max_retries=retry)
            session.mount("https://", adapter)
            session.mount("http://", adapter)
            session.verify = self._verify
            session.headers.update({"User-Agent": self.user_agent})
            self._session = session
        return self._session

    def close(self) -> None:
        """Close the session and release resources."""
        if self._session is not None:
            self._session.close()
            self._session = None

    def _fetch_page(self, service_tag: str) -> str:
        url = self.url + service_tag
        self.trace(f"GET {url}")
        resp = self._get_session().get(url, timeout=self.timeout)
        resp.raise_for_status()
        return resp.text

    def _parse_warranty_page(self, html: str) -> Tuple[str, str]:
        """Extract (model, warranty days left) from the support page."""
        soup = BeautifulSoup(html, "html.parser")

        model = ""
        desc = soup.find("div", class_="warrantDescription")
        if desc is not None:
            model = self._clean(desc.get_text(" "))

        warranty = ""
        item = soup.find("li", class_="TopTwoWarrantyListItem")
        bold = item.find("b") if item is not None else None
        if bold is not None:
            warranty = self._clean(bold.get_text()).strip("[]").strip()

        return model, warranty

    @staticmethod
    def _clean(text: str) -> str:
        """Collapse whitespace and drop CR/LF."""
        return re.sub(r"\s+", " ", text.replace("\r", "")).strip()
