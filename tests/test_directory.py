from datetime import date, timedelta

from clinic_booking.models import Appointment, Clinic, Doctor

from .conftest import auth_headers, future_slot, login, register


class TestClinics:

    def test_list_clinics_sorted_by_name(self, client, db_session):
        db_session.add_all([Clinic(name="Zeta Care", location="North"), Clinic(name="Alpha Health", location="South")])
        db_session.commit()

        response = client.get("/api/clinics")
        assert response.status_code == 200
        assert [c["name"] for c in response.json()] == ["Alpha Health", "Zeta Care"]

    def test_get_clinic(self, client, clinic):
        response = client.get(f"/api/clinics/{clinic['id']}")
        assert response.status_code == 200
        assert response.json() == clinic

    def test_get_missing_clinic(self, client):
        response = client.get("/api/clinics/9999")
        assert response.status_code == 404
        assert response.json()["error"] == "Clinic not found"

    def test_create_clinic_as_admin(self, client, admin_headers):
        response = client.post(
            "/api/clinics", json={"name": "New Clinic", "location": "Harbor Road"}, headers=admin_headers
        )
        assert response.status_code == 200
        assert response.json()["clinic"]["name"] == "New Clinic"

    def test_create_clinic_requires_admin(self, client, patient):
        response = client.post("/api/clinics", json={"name": "Mine", "location": "Here"}, headers=patient["headers"])
        assert response.status_code == 403

    def test_create_clinic_requires_auth(self, client):
        response = client.post("/api/clinics", json={"name": "Mine", "location": "Here"})
        assert response.status_code == 401

    def test_create_clinic_missing_location(self, client, admin_headers):
        response = client.post("/api/clinics", json={"name": "Nowhere"}, headers=admin_headers)
        assert response.status_code == 400

    def test_duplicate_clinic(self, client, admin_headers, clinic):
        response = client.post(
            "/api/clinics", json={"name": "central clinic", "location": "MAIN STREET 1"}, headers=admin_headers
        )
        assert response.status_code == 400
        assert "already exists" in response.json()["error"]

    def test_update_clinic(self, client, admin_headers, clinic):
        response = client.put(
            f"/api/clinics/{clinic['id']}", json={"name": "Central", "location": "Main Street 2"}, headers=admin_headers
        )
        assert response.status_code == 200
        assert response.json()["clinic"]["location"] == "Main Street 2"

    def test_update_missing_clinic(self, client, admin_headers):
        response = client.put("/api/clinics/9999", json={"name": "X", "location": "Y"}, headers=admin_headers)
        assert response.status_code == 404

    def test_delete_clinic_keeps_appointments(self, client, admin_headers, patient, doctor, clinic, db_session):
        booked = client.post(
            "/api/appointments",
            json={"doctor_id": doctor["profile"]["id"], "clinic_id": clinic["id"], "slot": future_slot()},
            headers=patient["headers"],
        ).json()["appointment"]

        response = client.delete(f"/api/clinics/{clinic['id']}", headers=admin_headers)
        assert response.status_code == 200

        assert client.get(f"/api/clinics/{clinic['id']}").status_code == 404
        assert db_session.get(Appointment, booked["id"]) is not None
        assert db_session.get(Doctor, doctor["profile"]["id"]).clinic_id is None


class TestDoctors:

    def test_list_doctors(self, client, doctor, db_session):
        db_session.add(Doctor(name="Dr. Retired", is_active=False, available_slots=[]))
        db_session.commit()

        response = client.get("/api/doctors")
        assert response.status_code == 200
        data = response.json()
        assert [d["name"] for d in data] == ["Dr. Who"]
        assert data[0]["clinic"]["name"] == "Central Clinic"

    def test_filter_doctors(self, client, doctor, clinic):
        assert len(client.get("/api/doctors", params={"clinic_id": clinic["id"]}).json()) == 1
        assert len(client.get("/api/doctors", params={"specialization": "cardiology"}).json()) == 1
        assert client.get("/api/doctors", params={"specialization": "Dermatology"}).json() == []

    def test_get_doctor(self, client, doctor):
        response = client.get(f"/api/doctors/{doctor['profile']['id']}")
        assert response.status_code == 200
        assert response.json()["specialization"] == "Cardiology"

    def test_get_missing_doctor(self, client):
        assert client.get("/api/doctors/9999").status_code == 404

    def test_admin_creates_doctor(self, client, admin_headers, clinic):
        response = client.post(
            "/api/doctors",
            json={"name": "Dr. Staff", "clinic_id": clinic["id"], "specialization": "Pediatrics"},
            headers=admin_headers,
        )
        assert response.status_code == 200
        assert response.json()["user_id"] is None
        assert response.json()["is_active"] is True

    def test_patient_cannot_create_doctor(self, client, patient):
        response = client.post("/api/doctors", json={"name": "Dr. Fake"}, headers=patient["headers"])
        assert response.status_code == 403

    def test_doctor_updates_own_profile(self, client, doctor):
        response = client.put(
            f"/api/doctors/{doctor['profile']['id']}",
            json={"experience_years": 12, "phone": "555-0100"},
            headers=doctor["headers"],
        )
        assert response.status_code == 200
        assert response.json()["experience_years"] == 12
        assert response.json()["phone"] == "555-0100"
        assert response.json()["specialization"] == "Cardiology"

    def test_patient_cannot_update_doctor(self, client, patient, doctor):
        response = client.put(
            f"/api/doctors/{doctor['profile']['id']}", json={"phone": "555"}, headers=patient["headers"]
        )
        assert response.status_code == 403


class TestDoctorSlots:

    def test_set_slots_sorted_and_deduplicated(self, client, doctor):
        late, early = future_slot(days=3, hour=15), future_slot(days=3, hour=9)
        response = client.put(
            f"/api/doctors/{doctor['profile']['id']}/slots",
            json={"available_slots": [late, early, late]},
            headers=doctor["headers"],
        )
        assert response.status_code == 200
        slots = response.json()["available_slots"]
        assert [s[:16] for s in slots] == [early[:16], late[:16]]

    def test_set_slots_requires_auth(self, client, doctor):
        response = client.put(f"/api/doctors/{doctor['profile']['id']}/slots", json={"available_slots": []})
        assert response.status_code == 401

    def test_other_doctor_cannot_set_slots(self, client, doctor):
        register(client, "rival@example.com", role="doctor")
        headers = auth_headers(login(client, "rival@example.com")["access_token"])

        response = client.put(
            f"/api/doctors/{doctor['profile']['id']}/slots",
            json={"available_slots": [future_slot()]},
            headers=headers,
        )
        assert response.status_code == 403

    def test_admin_can_set_slots(self, client, admin_headers, doctor):
        response = client.put(
            f"/api/doctors/{doctor['profile']['id']}/slots",
            json={"available_slots": [future_slot()]},
            headers=admin_headers,
        )
        assert response.status_code == 200

    def test_invalid_slot(self, client, doctor):
        response = client.put(
            f"/api/doctors/{doctor['profile']['id']}/slots",
            json={"available_slots": ["tomorrow-ish"]},
            headers=doctor["headers"],
        )
        assert response.status_code == 400

    def test_available_slots_exclude_booked(self, client, doctor, patient, clinic):
        doctor_id = doctor["profile"]["id"]
        slots = [future_slot(days=5, hour=h) for h in (9, 10, 11)] + [future_slot(days=6, hour=9)]
        client.put(f"/api/doctors/{doctor_id}/slots", json={"available_slots": slots}, headers=doctor["headers"])
        client.post(
            "/api/appointments",
            json={"doctor_id": doctor_id, "clinic_id": clinic["id"], "slot": slots[1]},
            headers=patient["headers"],
        )

        day = (date.today() + timedelta(days=5)).isoformat()
        response = client.get(f"/api/doctors/{doctor_id}/available-slots/{day}")
        assert response.status_code == 200
        assert response.json()["available_slots"] == ["09:00", "11:00"]
