"""
Validation service: reachability followed by the constraint validators.
"""

import logging
from typing import Iterable, List, Optional, Sequence

from rdflib import URIRef

from triplestore import GraphQueryFacade

from .base import ConstraintValidator
from .domain import ValidationFailedError, Violation
from .properties import (
    FunctionalValidator, InverseFunctionalValidator, InverseOfValidator,
    SubPropertyOfValidator, SymmetricValidator, TransitiveValidator,
)
from .reachability import ReachabilityAnalyzer
from .restrictions import (
    AllValuesFromValidator, MaxCardinalityValidator, MinCardinalityValidator,
    SomeValuesFromValidator,
)

logger = logging.getLogger(__name__)


def default_validators(facade: GraphQueryFacade) -> List[ConstraintValidator]:
    """The ten validators in the order they run on commit."""
    return [
        FunctionalValidator(facade),
        InverseFunctionalValidator(facade),
        SymmetricValidator(facade),
        TransitiveValidator(facade),
        InverseOfValidator(facade),
        SubPropertyOfValidator(facade),
        AllValuesFromValidator(facade),
        SomeValuesFromValidator(facade),
        MinCardinalityValidator(facade),
        MaxCardinalityValidator(facade),
    ]


class ValidationService:
    """Checks the schema axioms around a set of affected nodes.

    Validators run sequentially and the first violation ends the check, so
    when several axioms are broken only the first in validator order is
    reported.
    """

    def __init__(
        self,
        facade: GraphQueryFacade,
        validators: Optional[Sequence[ConstraintValidator]] = None,
    ):
        self.facade = facade
        self.reachability = ReachabilityAnalyzer(facade)
        self.validators = list(validators) if validators is not None else default_validators(facade)

    def find_violation(self, affected: Iterable[URIRef]) -> Optional[Violation]:
        """Return the first violation around ``affected``, or None if the graph is valid.

        Raises:
            StoreError: If the store cannot evaluate a query
        """
        anchors = self.reachability.reachable(affected)
        if not anchors:
            return None

        for validator in self.validators:
            violation = validator.validate(anchors)
            if violation is not None:
                return violation
        return None

    def validate(self, affected: Iterable[URIRef]) -> None:
        """Raise ValidationFailedError if the graph around ``affected`` violates the schema."""
        violation = self.find_violation(affected)
        if violation is not None:
            logger.warning(f"Validation failed: {violation}")
            raise ValidationFailedError(violation)
