import pytest
from decimal import Decimal

import config
from canteen import create_app, database
from canteen.models import Customer, Item, ItemType


@pytest.fixture(scope='session')
def app(tmp_path_factory):
    """Create application instance for testing on a throwaway SQLite file."""
    db_file = tmp_path_factory.mktemp('db') / 'canteen-test.db'

    class TestConfig(config.Config):
        TESTING = True
        SQLALCHEMY_DATABASE_URI = f'sqlite:///{db_file}'
        SQLALCHEMY_ECHO = False
        SQLITE_BUSY_TIMEOUT = 30.0
        TRACK_STOCK = False
        PURCHASE_TIMEOUT = 0
        DEFAULT_PAYMENT_METHOD = 'BALANCE'

    app = create_app(TestConfig)
    return app


@pytest.fixture(autouse=True)
def fresh_schema(app):
    """Recreate every table so each test starts from an empty ledger."""
    database.db_session.remove()
    database.drop_all()
    database.create_all()
    yield
    database.db_session.remove()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def session(fresh_schema):
    """Database session independent of the request-scoped one."""
    session = database.SessionLocal()
    yield session
    session.rollback()
    session.close()


@pytest.fixture(scope='function')
def customer(session):
    """Customer C001 with a balance of 50000."""
    customer = Customer(
        id='C001',
        name='Nguyen Van A',
        customer_type='student',
        balance=Decimal('50000')
    )
    session.add(customer)
    session.commit()
    return customer


@pytest.fixture(scope='function')
def items(session):
    """Items 10 and 11 (food, 12000, 10 units) and 20 (drink, 3000, 50 units)."""
    chicken = Item(id=10, type=ItemType.FOOD.value, name='Grilled chicken', price=Decimal('12000'),
                  description='With rice', amount=10)
    noodles = Item(id=11, type=ItemType.FOOD.value, name='Stir-fried noodles', price=Decimal('12000'),
                   description='', amount=10)
    tea = Item(id=20, type=ItemType.DRINK.value, name='Iced tea', price=Decimal('3000'),
               description='', amount=50)
    session.add_all([chicken, noodles, tea])
    session.commit()
    return {item.id: item for item in (chicken, noodles, tea)}
