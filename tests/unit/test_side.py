"""Tests for the per-side queueing pipeline."""

import random
import threading

from ferry_sim.models.ferry import Ferry
from ferry_sim.models.side import Side
from ferry_sim.models.vehicle import JourneyState, Vehicle, VehicleType


def _vehicles(*types, start_id=1):
    return [Vehicle(start_id + i, t, "Side_A") for i, t in enumerate(types)]


def _containers_holding(side, vehicle):
    """How many of the side's containers hold this vehicle."""
    count = sum(1 for v in side.queue if v is vehicle)
    count += sum(1 for b in side.booths if b.vehicle is vehicle)
    count += sum(1 for v in side.waiting_area if v is vehicle)
    return count


class TestArrivalQueue:
    def test_fifo_order(self):
        side = Side("Side_A")
        vehicles = _vehicles(VehicleType.CAR, VehicleType.TRUCK, VehicleType.MINIBUS)
        for v in vehicles:
            assert side.enqueue_arrival(v, 0.0) is True
        assert list(side.queue) == vehicles
        assert all(v.state is JourneyState.QUEUED for v in vehicles)

    def test_arrival_stamped(self):
        side = Side("Side_A")
        v = _vehicles(VehicleType.CAR)[0]
        side.enqueue_arrival(v, 4.5)
        assert v.outbound.arrival == 4.5

    def test_overflow_drops_vehicle(self):
        drops = []
        side = Side("Side_A", container_limit=2,
                    on_drop=lambda v, where: drops.append((v.label, where)))
        vehicles = _vehicles(VehicleType.CAR, VehicleType.CAR, VehicleType.CAR)
        results = [side.enqueue_arrival(v, 0.0) for v in vehicles]

        assert results == [True, True, False]
        assert vehicles[2].state is JourneyState.DROPPED
        assert len(side.queue) == 2
        assert drops == [("CAR_3", "Side_A queue")]

    def test_shuffle_keeps_members(self):
        side = Side("Side_A")
        vehicles = _vehicles(*[VehicleType.CAR] * 10)
        for v in vehicles:
            side.enqueue_arrival(v, 0.0)
        side.shuffle_queue(random.Random(3))
        assert sorted(v.id for v in side.queue) == list(range(1, 11))

    def test_concurrent_enqueue(self):
        side = Side("Side_A", container_limit=500)
        vehicles = _vehicles(*[VehicleType.CAR] * 200)

        def worker(chunk):
            for v in chunk:
                side.enqueue_arrival(v, 0.0)

        threads = [threading.Thread(target=worker, args=(vehicles[i::4],)) for i in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(side.queue) == 200
        assert len({id(v) for v in side.queue}) == 200


class TestTollBoothSlots:
    def test_claim_takes_queue_head(self):
        side = Side("Side_A", booth_count=2)
        first, second = _vehicles(VehicleType.CAR, VehicleType.TRUCK)
        side.enqueue_arrival(first, 0.0)
        side.enqueue_arrival(second, 0.0)

        claimed = side.claim_for_booth(0, 1.0)
        assert claimed is first
        assert first.state is JourneyState.AT_TOLL
        assert first.booth_name == "Side_A_Booth_1"
        assert first.outbound.toll_entry == 1.0
        assert side.booths[0].is_occupied
        assert list(side.queue) == [second]

    def test_busy_booth_claims_nothing(self):
        side = Side("Side_A", booth_count=1)
        for v in _vehicles(VehicleType.CAR, VehicleType.CAR):
            side.enqueue_arrival(v, 0.0)
        side.claim_for_booth(0, 1.0)
        assert side.claim_for_booth(0, 1.0) is None
        assert len(side.queue) == 1

    def test_empty_queue_claims_nothing(self):
        side = Side("Side_A")
        assert side.claim_for_booth(0, 0.0) is None

    def test_release_moves_to_waiting_area(self):
        side = Side("Side_A")
        v = _vehicles(VehicleType.MINIBUS)[0]
        side.enqueue_arrival(v, 0.0)
        side.claim_for_booth(1, 1.0)

        released = side.release_from_booth(1, 2.0)
        assert released is v
        assert not side.booths[1].is_occupied
        assert list(side.waiting_area) == [v]
        assert v.state is JourneyState.WAITING
        assert v.outbound.waiting_entry == 2.0

    def test_waiting_area_overflow_drops(self):
        drops = []
        side = Side("Side_A", booth_count=1, container_limit=1,
                    on_drop=lambda v, where: drops.append(where))
        a, b = _vehicles(VehicleType.CAR, VehicleType.CAR)
        side.enqueue_arrival(a, 0.0)
        side.claim_for_booth(0, 0.0)
        side.release_from_booth(0, 1.0)
        side.enqueue_arrival(b, 1.0)
        side.claim_for_booth(0, 1.0)
        side.release_from_booth(0, 2.0)

        assert list(side.waiting_area) == [a]
        assert b.state is JourneyState.DROPPED
        assert not side.booths[0].is_occupied
        assert drops == ["Side_A waiting area"]

    def test_vehicle_in_one_container_at_a_time(self):
        side = Side("Side_A")
        v = _vehicles(VehicleType.CAR)[0]
        side.enqueue_arrival(v, 0.0)
        assert _containers_holding(side, v) == 1
        side.claim_for_booth(0, 1.0)
        assert _containers_holding(side, v) == 1
        side.release_from_booth(0, 2.0)
        assert _containers_holding(side, v) == 1


class TestBoarding:
    def _side_with_waiting(self, *types):
        side = Side("Side_A")
        vehicles = _vehicles(*types)
        for v in vehicles:
            side.admit_to_waiting_area(v, 0.0)
        return side, vehicles

    def test_boards_what_fits_in_arrival_order(self):
        side, (truck1, truck2, car) = self._side_with_waiting(
            VehicleType.TRUCK, VehicleType.TRUCK, VehicleType.CAR)
        ferry = Ferry(capacity=4, docked_at=side)

        boarded = side.board_waiting(ferry, 5.0, trip_number=1)
        assert boarded == [truck1, car]
        assert list(side.waiting_area) == [truck2]
        assert ferry.load == 4
        assert truck2.state is JourneyState.WAITING

    def test_boarded_vehicles_leave_waiting_area(self):
        side, vehicles = self._side_with_waiting(VehicleType.CAR, VehicleType.MINIBUS)
        ferry = Ferry(capacity=20, docked_at=side)
        side.board_waiting(ferry, 5.0, trip_number=3)
        assert side.waiting_count() == 0
        assert all(v.state is JourneyState.BOARDED for v in vehicles)
        assert all(v.outbound_trip_number == 3 for v in vehicles)


class TestObservation:
    def test_visible_quotas_cover_every_container(self):
        side = Side("Side_A")
        waiting, tolling, queued = _vehicles(VehicleType.CAR, VehicleType.TRUCK,
                                             VehicleType.MINIBUS)
        side.admit_to_waiting_area(waiting, 0.0)
        side.enqueue_arrival(tolling, 0.0)
        side.claim_for_booth(0, 0.0)
        side.enqueue_arrival(queued, 0.0)

        assert sorted(side.visible_quotas()) == [1, 2, 3]

    def test_has_work(self):
        side = Side("Side_A")
        assert side.has_work() is False
        v = _vehicles(VehicleType.CAR)[0]
        side.enqueue_arrival(v, 0.0)
        assert side.has_work() is True
        side.claim_for_booth(0, 0.0)
        assert side.has_work() is True

    def test_counts(self):
        side = Side("Side_A")
        for v in _vehicles(VehicleType.CAR, VehicleType.CAR, VehicleType.CAR):
            side.enqueue_arrival(v, 0.0)
        side.claim_for_booth(0, 0.0)
        counts = side.counts()
        assert (counts.queued, counts.at_toll, counts.waiting) == (2, 1, 0)
        assert counts.total == 3
        assert len(side.vehicles()) == 3
