"""Shared fixtures for relopt tests."""

import logging

import pytest

from relopt.catalogue import Catalogue, CatalogueParser
from relopt.parser import QueryParser

COMPANY_CATALOGUE = """
Department:50:dept_id,50:dept_name,50
Employee:10000:emp_id,10000:dept_id,50:age,47
"""

# A.a=B.b joins to 1000 tuples, B.b2=C.c to 40 and C.c=D.d to 20
CHAIN_CATALOGUE = """
A:100:a,10
B:100:b,10:b2,50
C:20:c,20
D:20:d,20
Ghost:10:g,0
Nothing:0:n,0
"""


@pytest.fixture
def company():
    """Catalogue with the Department and Employee relations."""
    return CatalogueParser().parse(COMPANY_CATALOGUE)


@pytest.fixture
def chain():
    """Catalogue with relations A to D for join ordering."""
    return CatalogueParser().parse(CHAIN_CATALOGUE)


@pytest.fixture
def parse():
    """Parse a query against a catalogue."""

    def _parse(catalogue: Catalogue, text: str):
        return QueryParser(catalogue).parse(text)

    return _parse


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Undo handler changes made by the CLI's logging setup."""
    yield
    logger = logging.getLogger("relopt")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
