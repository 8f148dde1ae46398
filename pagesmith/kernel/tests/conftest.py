"""
Pagesmith kernel test configuration.

Kernel tests are pure and synchronous; shared records live here.
"""

import pytest

from pagesmith.kernel.types import Page, Site


@pytest.fixture
def site():
    return Site(id="site-1", slug="acme", name="Acme")


@pytest.fixture
def page():
    return Page(id="page-1", site_id="site-1", slug="home", title="Home", status="published", is_home=True)
