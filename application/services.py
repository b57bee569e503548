"""Application Services - Backend request/response mappers"""
from datetime import date
from typing import Dict, List, Optional, Sequence, Type, TypeVar

from pydantic import BaseModel, ValidationError

from domain.auth import LoginResult, User
from domain.entities import Hotel, Reservation
from domain.enums import UserRole
from infrastructure.http_client import ApiClient, ApiError

DEFAULT_PAGE_SIZE = 12

Model = TypeVar("Model", bound=BaseModel)


def _iso(value) -> str:
    return value.isoformat() if isinstance(value, date) else str(value)


def _parse(model: Type[Model], data) -> Model:
    """Map a response body, raising ApiError when it does not fit ``model``"""
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise ApiError(
            f"Unexpected {model.__name__} response: {e.error_count()} invalid field(s)",
            payload=data
        ) from e


def _parse_list(model: Type[Model], data) -> List[Model]:
    if data is None:
        return []
    if not isinstance(data, list):
        raise ApiError(f"Unexpected {model.__name__} list response", payload=data)
    return [_parse(model, item) for item in data]


def _expect_dict(data, what: str) -> dict:
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ApiError(f"Unexpected {what} response", payload=data)
    return data


class AuthService:
    """Service for login, registration and user management"""

    def __init__(self, client: ApiClient):
        self.client = client

    async def login(self, username: str, password: str) -> LoginResult:
        """Exchange credentials for a token"""
        data = await self.client.post("/login", json={"username": username, "password": password})
        return _parse(LoginResult, data)

    async def register(self, username: str, password: str, role: UserRole = UserRole.CUSTOMER) -> dict:
        """Create an account; returns the created id"""
        return await self.client.post(
            "/users",
            json={"username": username, "password": password, "tipo": UserRole(role).value}
        )

    async def get_all_users(self) -> List[User]:
        """Get all users (admin only)"""
        data = await self.client.get("/users")
        return _parse_list(User, data)

    async def get_user_by_id(self, user_id: int) -> User:
        """Get user by ID"""
        return _parse(User, await self.client.get(f"/users/{user_id}"))

    async def update_user(self, user_id: int, username: str, password: str) -> Optional[dict]:
        """Update a user's credentials"""
        return await self.client.put(f"/users/{user_id}", json={"username": username, "password": password})

    async def delete_user(self, user_id: int) -> None:
        """Delete user (admin only)"""
        await self.client.delete(f"/users/{user_id}")


class HotelService:
    """Service for hotel search, details and availability"""

    def __init__(self, client: ApiClient):
        self.client = client

    async def search(self, query: str = "", offset: int = 0, limit: int = DEFAULT_PAGE_SIZE) -> List[Hotel]:
        """Search hotels"""
        params = {}
        if query:
            params["q"] = query
        params["offset"] = offset
        params["limit"] = limit
        data = await self.client.get("/search", params=params)
        return _parse_list(Hotel, data)

    async def get_by_id(self, hotel_id: str) -> Hotel:
        """Get hotel by ID"""
        return _parse(Hotel, await self.client.get(f"/hotels/{hotel_id}"))

    async def get_reservations_by_hotel(self, hotel_id: str) -> List[Reservation]:
        """Get reservations for a hotel"""
        data = await self.client.get(f"/hotels/{hotel_id}/reservations")
        return _parse_list(Reservation, data)

    async def check_availability(
        self,
        hotel_ids: Sequence[str],
        check_in,
        check_out
    ) -> Dict[str, bool]:
        """Map of hotel id to availability for the given dates"""
        data = await self.client.post(
            "/hotels/availability",
            json={"hotel_ids": list(hotel_ids), "check_in": _iso(check_in), "check_out": _iso(check_out)}
        )
        return {str(k): bool(v) for k, v in _expect_dict(data, "availability").items()}


class ReservationService:
    """Service for reservation creation, cancellation and retrieval"""

    def __init__(self, client: ApiClient):
        self.client = client

    async def create(self, hotel_id: str, hotel_name: str, check_in, check_out) -> dict:
        """Create a new reservation; returns the created id"""
        return await self.client.post(
            "/reservations",
            json={
                "hotel_id": hotel_id,
                "hotel_name": hotel_name,
                "check_in": _iso(check_in),
                "check_out": _iso(check_out),
            }
        )

    async def cancel(self, reservation_id: str) -> None:
        """Cancel a reservation"""
        await self.client.delete(f"/reservations/{reservation_id}")

    async def get_by_user_id(self, user_id) -> List[Reservation]:
        """Get reservations by user ID"""
        data = await self.client.get(f"/users/{user_id}/reservations")
        return _parse_list(Reservation, data)

    async def get_by_user_and_hotel(self, user_id, hotel_id: str) -> List[Reservation]:
        """Get reservations by user and hotel"""
        data = await self.client.get(f"/users/{user_id}/hotels/{hotel_id}/reservations")
        return _parse_list(Reservation, data)


class AdminService:
    """Service for hotel administration and microservice operations"""

    def __init__(self, client: ApiClient):
        self.client = client

    async def create_hotel(self, hotel: Hotel) -> dict:
        """Create a new hotel; returns the created id"""
        return await self.client.post("/admin/hotels", json=hotel.to_payload())

    async def update_hotel(self, hotel_id: str, hotel: Hotel) -> Optional[dict]:
        """Update an existing hotel"""
        return await self.client.put(f"/admin/hotels/{hotel_id}", json=hotel.to_payload())

    async def delete_hotel(self, hotel_id: str) -> None:
        """Delete a hotel"""
        await self.client.delete(f"/admin/hotels/{hotel_id}")

    async def get_microservices_status(self) -> dict:
        """Get microservices status"""
        return await self.client.get("/admin/microservices")

    async def scale_service(self, service_name: str, replicas: int) -> Optional[dict]:
        """Scale a service to a number of replicas"""
        return await self.client.post(
            "/admin/microservices/scale",
            json={"service_name": service_name, "replicas": replicas}
        )

    async def get_service_logs(self, service_name: str) -> List[str]:
        """Get a service's recent log lines"""
        data = await self.client.get(f"/admin/microservices/{service_name}/logs")
        return list(_expect_dict(data, "logs").get("logs", []))

    async def restart_service(self, service_name: str) -> Optional[dict]:
        """Restart a service"""
        return await self.client.post(f"/admin/microservices/{service_name}/restart")


class HealthService:
    """Backend health check"""

    def __init__(self, client: ApiClient):
        self.client = client

    async def check(self) -> dict:
        return await self.client.get("/health")
