import pytest
from protean.integrations.pytest import DomainFixture


@pytest.fixture(scope="session")
def dispatch_bed():
    from dispatch.domain import dispatch

    bed = DomainFixture(dispatch)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(dispatch_bed):
    with dispatch_bed.domain_context():
        yield
