from stockroom import create_app
from stockroom.errors import ApiError

from tests.fakes import SAMPLE_PRODUCTS, FakeProductsApi


def make_runner(api):
    app = create_app('development', api_factory=lambda: api)
    return app.test_cli_runner()


def test_list_command():
    api = FakeProductsApi(SAMPLE_PRODUCTS)
    result = make_runner(api).invoke(args=['inventory', 'list', '--search', 'widget', '--sort', 'price', '--order', 'desc'])
    assert result.exit_code == 0
    lines = result.output.splitlines()
    assert 'Blue Widget' in lines[1]
    assert 'Widget' in lines[2]
    assert lines[-1] == 'page 1/1 (2 products)'
    assert api.list_calls()[0]['sort'] == 'price'
    assert api.list_calls()[0]['order'] == 'desc'


def test_list_command_reports_failure():
    api = FakeProductsApi(SAMPLE_PRODUCTS)
    api.fail['list'] = ApiError(502, 'Bad gateway')
    result = make_runner(api).invoke(args=['inventory', 'list'])
    assert result.exit_code == 1
    assert 'Bad gateway' in result.output


def test_categories_command():
    api = FakeProductsApi(SAMPLE_PRODUCTS)
    result = make_runner(api).invoke(args=['inventory', 'categories'])
    assert result.exit_code == 0
    assert result.output.splitlines() == ['Electronics', 'Hardware']
