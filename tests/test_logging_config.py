from __future__ import annotations

import logging
from logging.handlers import BufferingHandler

import pytest

from study_quiz.core.models import Mode
from study_quiz.core.services.quiz_session import QuizSession
from study_quiz.utils.logging_config import PACKAGE_LOGGER_NAME, configure_logging


@pytest.fixture
def package_logger():
    logger = logging.getLogger(PACKAGE_LOGGER_NAME)
    handlers, level = list(logger.handlers), logger.level
    yield logger
    logger.handlers[:] = handlers
    logger.setLevel(level)


def test_configure_logging_attaches_one_handler(package_logger):
    buffer = BufferingHandler(capacity=10)

    logger = configure_logging(logging.DEBUG, handler=buffer)
    again = configure_logging(logging.INFO, handler=BufferingHandler(capacity=10))

    assert logger is again is package_logger
    assert logger.level == logging.INFO
    assert logger.handlers.count(buffer) == 1
    assert logging.getLogger().handlers.count(buffer) == 0


def test_engine_records_reach_configured_handler(package_logger, three_questions):
    buffer = BufferingHandler(capacity=10)
    configure_logging(logging.INFO, handler=buffer)

    session = QuizSession(three_questions, Mode.LEARN, assignment_id="3")
    for _ in three_questions:
        session.advance()

    messages = [buffer.format(record) for record in buffer.buffer]
    assert any("Quiz session for assignment 3 completed" in message for message in messages)
    assert all(" | INFO | study_quiz.core.services.quiz_session | " in message for message in messages)
