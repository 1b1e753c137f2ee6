"""
End-to-end tests of validated transactions through the TransactionService.

HOW TO RUN:
From the project root, run:
    pytest src/transactions/test_service.py
"""

import pytest
from rdflib import OWL, RDF, URIRef

from ontology import PropertyCharacteristic, Restriction, RestrictionKind
from triplestore import ErrorKind, TripleStore
from validation import AxiomKind, ValidationFailedError

from .config import TransactionConfig
from .service import TransactionService
from .transaction import Transaction, TransactionState
from .validated import ValidatedTransaction

EX = "http://example.org/"
PERSON = URIRef(EX + "Person")
TEAM = URIRef(EX + "Team")
HAS_FRIEND = URIRef(EX + "hasFriend")
HAS_MEMBER = URIRef(EX + "hasMember")
HAS_EMAIL = URIRef(EX + "hasEmail")
A = URIRef(EX + "a")
B = URIRef(EX + "b")
T = URIRef(EX + "t")
X = URIRef(EX + "x")


@pytest.fixture
def service():
    service = TransactionService(config=TransactionConfig(resource_namespace=EX + "data/"))
    service.ontology.declare_class(PERSON)
    service.ontology.declare_class(TEAM)
    service.ontology.declare_property(HAS_FRIEND, PropertyCharacteristic.SYMMETRIC)
    service.ontology.declare_property(HAS_MEMBER)
    service.ontology.add_restriction(
        TEAM, Restriction(HAS_MEMBER, RestrictionKind.ALL_VALUES_FROM, PERSON)
    )
    service.store.commit()
    return service


def test_create_transaction(service):
    assert isinstance(service.create_transaction(), ValidatedTransaction)
    assert type(service.create_transaction(validated=False)) is Transaction

    plain = TransactionService(config=TransactionConfig(validate_on_commit=False))
    assert type(plain.create_transaction()) is Transaction
    assert isinstance(plain.create_transaction(validated=True), ValidatedTransaction)


def test_from_env(monkeypatch):
    monkeypatch.setenv("ONTOLOGY_TX_VALIDATE_ON_COMMIT", "false")
    store = TripleStore()

    service = TransactionService.from_env(store)

    assert service.store is store
    assert service.config.validate_on_commit is False


def test_symmetric_friend_scenario(service):
    """An asymmetric hasFriend edge fails; adding the reverse edge succeeds."""
    print("Testing symmetric hasFriend scenario...")

    tx = service.create_transaction().begin()
    a = tx.create(PERSON, A)
    b = tx.create(PERSON, B)
    a.add(HAS_FRIEND, b)

    with pytest.raises(ValidationFailedError) as excinfo:
        tx.commit()

    violation = excinfo.value.violation
    assert excinfo.value.kind == ErrorKind.VALIDATION
    assert violation.axiom == AxiomKind.SYMMETRIC
    assert violation.predicate == HAS_FRIEND
    assert violation.subject == A
    assert violation.related == (B,)
    for name in (HAS_FRIEND, A, B):
        assert str(name) in str(excinfo.value)
    assert (A, RDF.type, PERSON) not in service.store

    tx.begin()
    a = tx.create(PERSON, A)
    b = tx.create(PERSON, B)
    a.add(HAS_FRIEND, b)
    b.add(HAS_FRIEND, a)
    tx.commit()

    assert tx.state == TransactionState.COMMITTED
    assert (A, HAS_FRIEND, B) in service.store
    assert (B, HAS_FRIEND, A) in service.store

    print("✓ Symmetric hasFriend scenario working correctly")


def test_all_values_from_team_scenario(service):
    """A team member that is not a Person fails the commit."""
    print("Testing allValuesFrom Team scenario...")

    tx = service.create_transaction().begin()
    t = tx.create(TEAM, T)
    t.add(HAS_MEMBER, X)

    with pytest.raises(ValidationFailedError) as excinfo:
        tx.commit()

    violation = excinfo.value.violation
    assert violation.axiom == AxiomKind.ALL_VALUES_FROM
    assert violation.predicate == HAS_MEMBER
    assert violation.related == (X, PERSON)
    for name in (HAS_MEMBER, X, PERSON):
        assert str(name) in str(excinfo.value)

    tx.begin()
    t = tx.create(TEAM, T)
    t.add(HAS_MEMBER, tx.create(PERSON, X))
    tx.commit()

    assert tx.state == TransactionState.COMMITTED

    print("✓ allValuesFrom Team scenario working correctly")


def test_violation_found_through_lookup(service):
    """Edits to resources found in a later transaction are validated too."""
    tx = service.create_transaction().begin()
    tx.create(PERSON, A)
    tx.create(PERSON, B)
    tx.commit()

    tx = service.create_transaction().begin()
    a = tx.find_by_id(PERSON, A)
    a.add(HAS_FRIEND, B)
    with pytest.raises(ValidationFailedError):
        tx.commit()

    tx.begin()
    a, b = tx.find_all(PERSON)
    a.add(HAS_FRIEND, b)
    b.add(HAS_FRIEND, a)
    tx.commit()
    assert (B, HAS_FRIEND, A) in service.store


def test_minted_iris_use_the_namespace(service):
    tx = service.create_transaction().begin()
    person = tx.create(PERSON)
    tx.commit()

    assert str(person.identifier).startswith(EX + "data/")
    assert (person.identifier, RDF.type, PERSON) in service.store


def test_same_as_resolves_functional_conflict(service):
    """Linking two values by owl:sameAs makes a functional property valid again."""
    service.ontology.declare_property(HAS_EMAIL, PropertyCharacteristic.FUNCTIONAL)
    service.store.commit()
    first, second = URIRef(EX + "mail1"), URIRef(EX + "mail2")

    tx = service.create_transaction().begin()
    a = tx.create(PERSON, A)
    a.add(HAS_EMAIL, first)
    a.add(HAS_EMAIL, second)
    with pytest.raises(ValidationFailedError) as excinfo:
        tx.commit()
    assert excinfo.value.violation.axiom == AxiomKind.FUNCTIONAL

    tx.begin()
    a = tx.create(PERSON, A)
    a.add(HAS_EMAIL, first)
    a.add(HAS_EMAIL, second)
    a.graph.add((first, OWL.sameAs, second))
    tx.commit()
    assert tx.state == TransactionState.COMMITTED


def test_plain_transaction_skips_validation(service):
    tx = service.create_transaction(validated=False).begin()
    a = tx.create(PERSON, A)
    a.add(HAS_FRIEND, B)
    tx.commit()

    assert (A, HAS_FRIEND, B) in service.store
