from typing import List

from fastapi import APIRouter, Depends

from carpool.routers.deps import get_ride_service
from carpool.schemas.ride import LocationUpdate, RideCreate, RideOffer
from carpool.services.rides import RideService

router = APIRouter(prefix="/rides", tags=["rides"])


@router.get("", response_model=List[RideOffer])
async def list_rides(service: RideService = Depends(get_ride_service)):
    return await service.list_rides()


@router.post("", response_model=RideOffer, status_code=201)
async def create_ride(payload: RideCreate, service: RideService = Depends(get_ride_service)):
    return await service.create(payload)


@router.put("/{ride_id}/location", response_model=RideOffer)
async def update_location(
    ride_id: str,
    loc: LocationUpdate,
    service: RideService = Depends(get_ride_service),
):
    return await service.report_position(ride_id.strip(), loc.current_lat, loc.current_lng)


@router.delete("/{ride_id}")
async def delete_ride(ride_id: str, service: RideService = Depends(get_ride_service)):
    await service.delete(ride_id.strip())
    return {"message": "Ride deleted successfully"}
