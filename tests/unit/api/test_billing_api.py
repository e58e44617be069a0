"""
Unit tests for the billing API endpoints.
"""
import pytest

from factories import BulkMeterReadingFactory

API = "/api/v1/billing"


def _calculate_payload(**overrides):
    payload = {
        "usage_m3": 10,
        "customer_type": "Domestic",
        "sewerage_connection": "No",
        "meter_size": 0.5,
        "billing_month": "2024-03",
    }
    payload.update(overrides)
    return payload


class TestHealth:
    """Test service endpoints."""

    @pytest.mark.asyncio
    async def test_health(self, api_client):
        """Test the health check."""
        response = await api_client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    @pytest.mark.asyncio
    async def test_root(self, api_client):
        """Test the root endpoint."""
        response = await api_client.get("/")
        assert response.status_code == 200
        assert response.json()["name"] == "Water Billing Service"


class TestCalculateEndpoint:
    """Test POST /billing/calculate."""

    @pytest.mark.asyncio
    async def test_calculate_bill(self, api_client):
        """Test a Domestic bill with camelCase fields."""
        response = await api_client.post(f"{API}/calculate", json=_calculate_payload())
        assert response.status_code == 200

        data = response.json()
        assert data["success"] is True
        assert data["bill"]["baseWaterCharge"] == 65.0
        assert data["bill"]["maintenanceFee"] == 0.65
        assert data["bill"]["sanitationFee"] == 4.55
        assert data["bill"]["vatAmount"] == 0.0
        assert data["bill"]["meterRent"] == 37.0
        assert data["bill"]["sewerageCharge"] == 0.0
        assert data["bill"]["totalBill"] == 107.2
        assert data["bill"]["waterTierBreakdown"] is None

    @pytest.mark.asyncio
    async def test_diagnostic(self, api_client):
        """Test the diagnostic reports the tariff and rent match."""
        response = await api_client.post(f"{API}/calculate", json=_calculate_payload(meter_size=0.75))
        diagnostic = response.json()["diagnostic"]
        assert diagnostic["year"] == 2024
        assert diagnostic["tariff_found"] is True
        assert diagnostic["matched_key"] == "0.75"
        assert diagnostic["matched_value"] == 45.0
        assert diagnostic["matched_strategy"] == "exact"

    @pytest.mark.asyncio
    async def test_breakdown(self, api_client):
        """Test breakdown lines when requested."""
        response = await api_client.post(
            f"{API}/calculate",
            json=_calculate_payload(usage_m3=16, sewerage_connection="Yes", include_breakdown=True),
        )
        bill = response.json()["bill"]
        assert [line["usage"] for line in bill["waterTierBreakdown"]] == [5.0, 9.0, 2.0]
        assert bill["waterTierBreakdown"][-1]["end"] == "Infinity"
        assert bill["sewerageCharge"] == 43.0

    @pytest.mark.asyncio
    async def test_missing_tariff(self, api_client):
        """Test a year without a tariff gives a zero bill."""
        response = await api_client.post(f"{API}/calculate", json=_calculate_payload(billing_month="2023-03"))
        assert response.status_code == 200

        data = response.json()
        assert data["success"] is False
        assert data["bill"]["totalBill"] == 0.0
        assert data["diagnostic"]["tariff_found"] is False

    @pytest.mark.asyncio
    @pytest.mark.parametrize("overrides", [
        {"usage_m3": -1},
        {"meter_size": -0.5},
        {"billing_month": "2024/03"},
        {"customer_type": "Industrial"},
        {"sewerage_connection": "Maybe"},
    ])
    async def test_invalid_request(self, api_client, overrides):
        """Test request validation errors."""
        response = await api_client.post(f"{API}/calculate", json=_calculate_payload(**overrides))
        assert response.status_code == 422


class TestBulkMeterEndpoint:
    """Test POST /billing/bulk-meters/difference."""

    @pytest.mark.asyncio
    async def test_difference_bill(self, api_client):
        """Test a bulk meter difference bill."""
        response = await api_client.post(f"{API}/bulk-meters/difference", json=BulkMeterReadingFactory())
        assert response.status_code == 200

        data = response.json()
        assert data["bulk_usage"] == 30.0
        assert data["difference_usage"] == 12.0
        assert data["difference_bill"]["totalBill"] == 192.84
        assert data["total_payable"] == 192.84
        assert data["payment_status"] == "Unpaid"

    @pytest.mark.asyncio
    async def test_minimum_difference(self, api_client):
        """Test a zero difference is billed at the minimum."""
        response = await api_client.post(
            f"{API}/bulk-meters/difference",
            json=BulkMeterReadingFactory(individual_usages=[30]),
        )
        assert response.json()["difference_usage"] == 3.0


class TestTariffEndpoints:
    """Test tariff lookup endpoints."""

    @pytest.mark.asyncio
    async def test_get_tariff(self, api_client):
        """Test fetching a tariff by type and year."""
        response = await api_client.get(f"{API}/tariffs/Domestic/2024")
        assert response.status_code == 200

        data = response.json()
        assert data["customer_type"] == "Domestic"
        assert data["tiers"][0] == {"rate": 5.0, "limit": 5.0}
        assert data["tiers"][-1]["limit"] == "Infinity"

    @pytest.mark.asyncio
    async def test_get_rental_tariff(self, api_client):
        """Test customer types with spaces in the path."""
        response = await api_client.get(f"{API}/tariffs/rental domestic/2024")
        assert response.status_code == 200
        assert len(response.json()["tiers"]) == 4

    @pytest.mark.asyncio
    async def test_missing_tariff(self, api_client):
        """Test a missing tariff is a 404."""
        response = await api_client.get(f"{API}/tariffs/Domestic/2030")
        assert response.status_code == 404

        data = response.json()
        assert data["error"] == "ENTITY_NOT_FOUND"
        assert data["details"]["customer_type"] == "Domestic"

    @pytest.mark.asyncio
    async def test_list_tariffs(self, api_client):
        """Test listing with filters."""
        response = await api_client.get(f"{API}/tariffs")
        assert response.json()["total"] == 4

        response = await api_client.get(f"{API}/tariffs", params={"customer_type": "Non-domestic"})
        assert response.json()["total"] == 1


class TestApiVersioning:
    """Test the versioned router prefix."""

    def test_default_version_prefix(self):
        """Test routes are mounted under the configured version."""
        from water_billing.api.v1 import api_router
        from water_billing.config import get_settings

        assert api_router.prefix == f"/{get_settings().api_version}"

    def test_custom_version_prefix(self):
        """Test a different version string changes the route paths."""
        from water_billing.api.v1 import create_api_router

        paths = {route.path for route in create_api_router("v2").routes}
        assert "/v2/billing/calculate" in paths
        assert "/v2/billing/tariffs/{customer_type}/{year}" in paths
