from cranedb.apps.plant import models, services


def test_list_active_machines_skips_retired_cranes(db_session, plant):
    machines = services.list_active_machines(db_session)
    ids = [machine.crane_id for machine in machines]
    assert plant.cranes.hbm_retired.id not in ids
    assert ids == sorted(ids)
    assert len(machines) == 7
    by_id = {machine.crane_id: machine.department_code for machine in machines}
    assert by_id[plant.cranes.hsm_3.id] == "HSM"
    assert by_id[plant.cranes.fab_1.id] == "FAB"


def test_list_active_machines_skips_inactive_sheds(db_session, plant):
    shed = plant.sheds["hsm_b"]
    shed.is_active = False
    db_session.commit()

    ids = [machine.crane_id for machine in services.list_active_machines(db_session)]
    assert plant.cranes.hsm_3.id not in ids
    assert services.get_machine_department(db_session, plant.cranes.hsm_3.id) is None


def test_get_machine_department(db_session, plant):
    assert services.get_machine_department(db_session, plant.cranes.ptm_1.id) == "PTM"
    assert services.get_machine_department(db_session, plant.cranes.hbm_retired.id) is None
    assert services.get_machine_department(db_session, 12345) is None


def test_get_crane_returns_inactive_cranes_too(db_session, plant):
    crane = services.get_crane(db_session, plant.cranes.hbm_retired.id)
    assert isinstance(crane, models.Crane)
    assert crane.is_active is False
    assert crane.shed.department.code == "HBM"
    assert services.get_crane(db_session, 12345) is None
