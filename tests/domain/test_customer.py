"""Unit tests for customer details and phone validation."""

import pytest

from storefront.domain.exceptions import ValidationError
from storefront.domain.model.customer import CustomerInfo, PaymentMethod, is_valid_phone


class TestPhoneValidation:

    @pytest.mark.parametrize(
        "phone",
        ["+971501234567", "+971 50 123 4567", "+966512345678", "+14155550100", "+919876543210"],
    )
    def test_valid(self, phone):
        assert is_valid_phone(phone)

    @pytest.mark.parametrize(
        "phone",
        ["", "0501234567", "+97150123456", "+9715012345678", "+971-50-1234567", "+999123456"],
    )
    def test_invalid(self, phone):
        assert not is_valid_phone(phone)


class TestValidateFor:

    def test_first_problem_reported(self):
        with pytest.raises(ValidationError, match="name is required"):
            CustomerInfo(name=" ", phone="").validate_for(PaymentMethod.WHATSAPP)

    def test_phone_required(self):
        with pytest.raises(ValidationError, match="Phone number is required"):
            CustomerInfo(name="Ali", phone="").validate_for(PaymentMethod.WHATSAPP)

    def test_address_only_needed_for_home_delivery(self):
        info = CustomerInfo(name="Ali", phone="+971501234567")
        info.validate_for(PaymentMethod.WHATSAPP)
        info.validate_for(PaymentMethod.BANK_TRANSFER)
        with pytest.raises(ValidationError, match="Address is required"):
            info.validate_for(PaymentMethod.HOME_DELIVERY)

    def test_full_address(self):
        assert CustomerInfo("A", "+1", address="Villa 3", city="Dubai").full_address == "Villa 3, Dubai"
        assert CustomerInfo("A", "+1").full_address is None


class TestPaymentMethod:

    def test_which_channels_persist(self):
        assert PaymentMethod.HOME_DELIVERY.persists_order
        assert PaymentMethod.BANK_TRANSFER.persists_order
        assert not PaymentMethod.WHATSAPP.persists_order
        assert not PaymentMethod.ONLINE.persists_order
