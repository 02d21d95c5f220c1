import pytest

from tripgen.jobs.celery_app import celery_app


@pytest.fixture
def eager_celery():
    """Run Celery tasks inline, re-raising task errors, for the duration of a test."""
    previous = (celery_app.conf.task_always_eager, celery_app.conf.task_eager_propagates)
    celery_app.conf.task_always_eager = True
    celery_app.conf.task_eager_propagates = True
    yield celery_app
    celery_app.conf.task_always_eager, celery_app.conf.task_eager_propagates = previous
