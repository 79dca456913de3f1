import shutil
import pytest
from django.conf import settings


@pytest.fixture(autouse=True, scope="session")
def _temp_media(tmp_path_factory):
    """Override MEDIA_ROOT to use a temporary directory for tests."""
    p = tmp_path_factory.mktemp("media")
    settings.MEDIA_ROOT = str(p)
    yield
    shutil.rmtree(p, ignore_errors=True)
