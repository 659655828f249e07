import threading
from decimal import Decimal

from stockroom.errors import ApiError, NetworkError
from stockroom.models import ProductDraft, ViewModel
from stockroom.query_state import QueryState, SortField, SortOrder
from stockroom.sync import MALFORMED_MESSAGE, NETWORK_MESSAGE, ProductSync

from tests.fakes import SAMPLE_PRODUCTS, FakeProductsApi


def names(view):
    return [p.name for p in view.items]


def make_sync(products=SAMPLE_PRODUCTS):
    api = FakeProductsApi(products)
    return api, ProductSync(api)


def test_search_widget_scenario():
    api, sync = make_sync()
    view = sync.fetch_page(QueryState(search_term='widget'))
    assert len(view.items) == 2
    assert names(view) == ['Blue Widget', 'Widget']
    assert view.loading is False
    assert view.error is None
    assert view.total_pages == 1
    assert view.total_items == 2
    assert api.list_calls() == [
        {'page': 1, 'limit': 10, 'sort': 'name', 'order': 'asc', 'search': 'widget'},
    ]


def test_one_request_per_fetch_with_filters():
    api, sync = make_sync()
    state = QueryState(category='Electronics', sort_field=SortField.PRICE, sort_order=SortOrder.DESC)
    view = sync.fetch_page(state)
    assert names(view) == ['Gadget', 'Cable']
    assert len(api.list_calls()) == 1
    assert api.list_calls()[0]['category'] == 'Electronics'


def test_pagination_metadata():
    products = [
        {'name': f'Part {i:02d}', 'quantity': i, 'price': 1, 'category': 'Parts'}
        for i in range(23)
    ]
    _, sync = make_sync(products)
    view = sync.fetch_page(QueryState(page=3))
    assert view.page == 3
    assert view.total_pages == 3
    assert view.total_items == 23
    assert names(view) == ['Part 20', 'Part 21', 'Part 22']


def test_loading_keeps_stale_items():
    api, sync = make_sync()
    first = sync.fetch_page(QueryState())
    seen = []
    original = api.list_products

    def spy(params):
        seen.append(sync.view)
        return original(params)

    api.list_products = spy
    sync.fetch_page(QueryState(search_term='cable'))
    assert seen[0].loading is True
    assert seen[0].items == first.items
    assert sync.view.loading is False


def test_first_fetch_shows_placeholder():
    api, sync = make_sync()
    seen = []
    original = api.list_products

    def spy(params):
        seen.append(sync.view.placeholder)
        return original(params)

    api.list_products = spy
    sync.fetch_page(QueryState())
    assert seen == [True]
    assert sync.view.placeholder is False


def test_failure_keeps_previous_items():
    api, sync = make_sync()
    before = sync.fetch_page(QueryState())
    api.fail['list'] = NetworkError('connection refused')
    view = sync.fetch_page(QueryState(search_term='gadget'))
    assert view.items == before.items
    assert view.loading is False
    assert view.error == NETWORK_MESSAGE


def test_http_error_uses_server_message():
    api, sync = make_sync()
    api.fail['list'] = ApiError(503, 'Database offline')
    assert sync.fetch_page(QueryState()).error == 'Database offline'
    api.fail['list'] = ApiError(500)
    view = sync.fetch_page(QueryState())
    assert view.error
    assert '500' in view.error


def test_malformed_body():
    api, sync = make_sync()
    api.list_products = lambda params: {'products': [{'name': 'no id'}]}
    view = sync.fetch_page(QueryState())
    assert view.error == MALFORMED_MESSAGE
    api.list_products = lambda params: {'items': []}
    assert sync.fetch_page(QueryState()).error == MALFORMED_MESSAGE


def test_success_clears_error():
    api, sync = make_sync()
    api.fail['list'] = NetworkError('down')
    assert sync.fetch_page(QueryState()).error
    del api.fail['list']
    assert sync.fetch_page(QueryState()).error is None


def test_stale_response_discarded_when_resolved_late():
    api, sync = make_sync()
    state_a = QueryState(search_term='gadget')
    state_b = QueryState(search_term='cable')
    original = api.list_products

    def list_products(params):
        result = original(params)
        if params['search'] == 'gadget':
            # B is issued and resolves while A is still in flight.
            sync.fetch_page(state_b)
        return result

    api.list_products = list_products
    returned = sync.fetch_page(state_a)
    assert names(sync.view) == ['Cable']
    assert returned == sync.view


def test_stale_response_discarded_across_threads():
    api, sync = make_sync()
    entered = threading.Event()
    release = threading.Event()
    original = api.list_products

    def list_products(params):
        if params['search'] == 'gadget':
            entered.set()
            release.wait(5)
        return original(params)

    api.list_products = list_products
    results = []
    worker = threading.Thread(
        target=lambda: results.append(sync.fetch_page(QueryState(search_term='gadget')))
    )
    worker.start()
    assert entered.wait(5)
    view_b = sync.fetch_page(QueryState(search_term='cable'))
    release.set()
    worker.join(5)
    assert names(sync.view) == ['Cable']
    assert results == [view_b]


def test_category_failure_is_silent():
    api, sync = make_sync()
    assert sync.fetch_categories() == ['Electronics', 'Hardware']
    sync.fetch_page(QueryState())
    api.fail['categories'] = ApiError(500)
    assert sync.fetch_categories() == ['Electronics', 'Hardware']
    assert sync.view.error is None


def test_category_failure_on_first_load_leaves_empty_list():
    api, sync = make_sync()
    api.fail['categories'] = NetworkError('down')
    assert sync.fetch_categories() == []
    assert sync.view == ViewModel()


def test_create_then_fetch_contains_product_once():
    _, sync = make_sync()
    draft = ProductDraft(name='Widget Pro', quantity=3, price=Decimal('9.99'), category='Hardware')
    result = sync.create(draft)
    assert result.ok
    assert result.product.name == 'Widget Pro'
    view = sync.fetch_page(QueryState(search_term='widget', category='Hardware'))
    assert names(view).count('Widget Pro') == 1


def test_update_twice_same_as_once():
    api, sync = make_sync()
    draft = ProductDraft(name='Gadget', quantity=9, price=Decimal('11.50'), category='Electronics')
    assert sync.update('2', draft).ok
    once = dict(api.products['2'])
    assert sync.update('2', draft).ok
    assert api.products['2'] == once
    assert len(api.products) == len(SAMPLE_PRODUCTS)


def test_mutation_failure_messages():
    api, sync = make_sync()
    api.fail['create'] = ApiError(409, 'Product already exists')
    result = sync.create(ProductDraft(name='Widget', quantity=1, price=Decimal('1')))
    assert not result.ok
    assert result.error == 'Product already exists'

    api.fail['delete'] = ApiError(500)
    result = sync.remove('1')
    assert not result.ok
    assert result.error == 'Failed to delete product.'

    api.fail['update'] = NetworkError('timeout')
    result = sync.update('1', ProductDraft(name='Widget', quantity=1, price=Decimal('1')))
    assert result.error == 'Failed to update product.'


def test_remove_does_not_touch_view():
    _, sync = make_sync()
    before = sync.fetch_page(QueryState())
    assert sync.remove('1').ok
    assert sync.view == before


def test_rejected_transition_does_not_fetch():
    api, sync = make_sync()
    sync.fetch_page(QueryState(search_term='cable'))
    view = sync.transition(lambda state, view: None)
    assert len(api.list_calls()) == 1
    assert view is sync.view
    assert sync.state.search_term == 'cable'


def test_close_closes_api():
    api, sync = make_sync()
    sync.close()
    assert api.closed
