import pytest

from testsuites.ui_testing.framework.page_base import BasePage
from testsuites.ui_testing.framework.session_registry import SessionRegistry
from testsuites.ui_testing.framework.wait_helpers import Waiter, WaitTimeoutError
from testsuites.unit.fakes import FakeElement


class CatalogPage(BasePage):
    URL_PATH = "/catalog.html"
    PAGE_TITLE = "Catalog"


class CartPage(BasePage):
    URL_PATH = "/cart.html"


@pytest.fixture
def session(config, fake_playwright):
    registry = SessionRegistry(config, fake_playwright)
    yield registry.create_session("chrome", headless=True)
    registry.destroy_session()


@pytest.fixture
def page(session, config):
    waiter = Waiter(session, timeout=0.3, poll_interval=0.05)
    return CatalogPage(session, config, "http://shop.test/", waiter)


def test_open_navigates_to_page_url(page, session):
    assert page.open() is page
    assert session.page.url == "http://shop.test/catalog.html"
    assert "return document.readyState" in session.page.evaluated


def test_open_waits_for_document(page, session):
    session.page.ready_state = "interactive"
    with pytest.raises(WaitTimeoutError):
        page.open()


def test_navigate_to(page, session):
    page.navigate_to("orders/42")
    assert session.page.url == "http://shop.test/orders/42"

    page.navigate_to("https://other.test/x")
    assert session.page.url == "https://other.test/x"


def test_is_loaded_checks_title(page, session):
    session.page.page_title = "Catalog | Shop"
    assert page.is_loaded()

    session.page.page_title = "Cart | Shop"
    assert not page.is_loaded()


def test_go_to_waits_for_destination_url(page, session):
    session.page.url = "http://shop.test/cart.html"
    cart = page.go_to(CartPage)

    assert isinstance(cart, CartPage)
    assert cart.session is session
    assert cart.waiter is page.waiter


def test_go_to_times_out_on_wrong_url(page, session):
    session.page.url = "http://shop.test/catalog.html"
    with pytest.raises(WaitTimeoutError):
        page.go_to(CartPage)


def test_click_waits_for_enabled(page, session):
    button = FakeElement(enabled=False)
    session.page.add("#buy", button)

    with pytest.raises(WaitTimeoutError):
        page.click("#buy")
    assert button.clicks == []

    button.enabled = True
    page.click("#buy")
    page.right_click("#buy")
    page.double_click("#buy")
    assert button.clicks == ["left", "right", "double"]


def test_fill_and_read_back(page, session):
    session.page.add("#password")

    page.fill("#password", "s3cret")
    assert page.get_value("#password") == "s3cret"

    page.fill("#password", "other")
    assert page.get_value("#password") == "other"


def test_page_does_not_shadow_builtin_type():
    assert "type" not in vars(BasePage)


def test_get_text_of_hidden_element_times_out(page, session):
    session.page.add("#banner", FakeElement(text="Sale", visible=False))

    with pytest.raises(WaitTimeoutError) as exc_info:
        page.get_text("#banner")
    assert "visibility of #banner" in str(exc_info.value)

    session.page.dom["#banner"][0].visible = True
    assert page.get_text("#banner") == "Sale"


def test_is_displayed_never_raises(page, session):
    assert page.is_displayed("#missing", timeout=0.1) is False

    session.page.add("#present")
    assert page.is_displayed("#present") is True


def test_state_queries(page, session):
    session.page.add("#terms", FakeElement(checked=False, attributes={"data-required": "yes"}))

    assert page.is_enabled("#terms")
    assert not page.is_checked("#terms")
    page.set_checked("#terms")
    assert page.is_checked("#terms")
    assert page.get_attribute("#terms", "data-required") == "yes"


def test_select_options(page, session):
    session.page.add("#country")

    page.select_by_text("#country", "Norway")
    assert page.get_value("#country") == "Norway"
    page.select_by_index("#country", 2)
    assert page.get_value("#country") == "2"


def test_javascript_helpers(page, session):
    link = FakeElement()
    session.page.add("#hidden-link", link)

    page.click_js("#hidden-link")
    page.fill_js("#hidden-link", "typed")
    page.scroll_to_element("#hidden-link")
    page.scroll_to_bottom()

    assert link.clicks == ["js", "scroll"]
    assert link.value == "typed"
    assert "window.scrollTo(0, document.body.scrollHeight)" in session.page.evaluated


def test_count_does_not_wait(page, session):
    assert page.count(".row") == 0
    session.page.add(".row", FakeElement(), FakeElement())
    assert page.count(".row") == 2


def test_screenshot(page):
    path = page.screenshot("catalog view", attach_to_allure=False)

    assert path is not None
    assert path.exists()
    assert path.name.startswith("catalog_view_page_")


def test_default_base_url_from_config(session, config):
    page = CatalogPage(session, config)
    assert page.url == "http://localhost:3000/catalog.html"
    assert page.waiter.timeout == 2
