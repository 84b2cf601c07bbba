"""Unit tests for src/services/reference.py: closed domains and positivity checks."""

import pytest

from src.errors import ValidationError
from src.schemas.records import CatalogRecord, EntityKind, ShipmentRecord, StockRecord, UserRecord
from src.services.reference import (
    BROKERS,
    REPRINTS,
    TEA_GRADES,
    check_member,
    check_positive,
    validate_reference_fields,
)
from tests.conftest import catalog_record, stock_record


class TestDomains:
    def test_grade_domain_size(self) -> None:
        assert len(TEA_GRADES) == 18
        assert "BP1" in TEA_GRADES

    def test_broker_domain_size(self) -> None:
        assert len(BROKERS) == 16
        assert "UIBD" in BROKERS

    def test_reprint_allows_null(self) -> None:
        assert None in REPRINTS
        assert "8" not in REPRINTS


class TestCheckMember:
    def test_member_passes(self) -> None:
        check_member("grade", "PD", TEA_GRADES)

    def test_non_member_raises_with_camel_case_field(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            check_member("packaging_instructions", "box", {"oneJuteOnePolly"})
        assert exc_info.value.field == "packagingInstructions"
        assert exc_info.value.value == "box"
        assert "Invalid packagingInstructions 'box'" in str(exc_info.value)


class TestCheckPositive:
    @pytest.mark.parametrize("value", [0, -1, -0.5, None])
    def test_non_positive_raises(self, value: float | None) -> None:
        with pytest.raises(ValidationError) as exc_info:
            check_positive("net_weight", value)
        assert exc_info.value.field == "netWeight"

    def test_positive_passes(self) -> None:
        check_positive("bags", 1)


class TestValidateReferenceFields:
    def test_valid_catalog_passes(self) -> None:
        validate_reference_fields(EntityKind.CATALOG, CatalogRecord.model_validate(catalog_record()))

    def test_unknown_broker_rejected(self) -> None:
        record = CatalogRecord.model_validate(catalog_record(broker="XXXX"))
        with pytest.raises(ValidationError) as exc_info:
            validate_reference_fields(EntityKind.CATALOG, record)
        assert exc_info.value.field == "broker"
        assert exc_info.value.value == "XXXX"

    def test_invalid_reprint_rejected(self) -> None:
        record = CatalogRecord.model_validate(catalog_record(reprint="9"))
        with pytest.raises(ValidationError, match="reprint"):
            validate_reference_fields(EntityKind.CATALOG, record)

    def test_zero_stock_weight_rejected(self) -> None:
        record = StockRecord.model_validate(stock_record(weight=0))
        with pytest.raises(ValidationError) as exc_info:
            validate_reference_fields(EntityKind.STOCKS, record)
        assert exc_info.value.field == "weight"

    def test_enumerated_checked_before_positive(self) -> None:
        record = StockRecord.model_validate(stock_record(grade="ZZ", bags=0))
        with pytest.raises(ValidationError) as exc_info:
            validate_reference_fields(EntityKind.STOCKS, record)
        assert exc_info.value.field == "grade"

    def test_shipment_vessel_rejected(self) -> None:
        record = ShipmentRecord.model_validate(
            {
                "shipmark": "SHIP-1",
                "vessel": "fifth",
                "packagingInstructions": "oneJuteOnePolly",
                "userCognitoId": "U1",
            }
        )
        with pytest.raises(ValidationError, match="vessel"):
            validate_reference_fields(EntityKind.SHIPMENT, record)

    def test_user_role_rejected(self) -> None:
        record = UserRecord.model_validate({"userCognitoId": "U9", "role": "superuser"})
        with pytest.raises(ValidationError, match="role"):
            validate_reference_fields(EntityKind.USER, record)

    def test_kind_without_rules_passes(self) -> None:
        record = UserRecord.model_validate({"userCognitoId": "U9"})
        validate_reference_fields(EntityKind.CONTACT, record)
