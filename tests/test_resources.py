import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from schoolsafe.db.session import init_db
from schoolsafe.models.quiz import Quiz
from schoolsafe.errors import Conflict, NotFound
from schoolsafe.models.resource import ResourceCompletion
from schoolsafe.quizzes import engine
from schoolsafe.resources import service
from schoolsafe.schemas.resource import ResourceCreate, ResourceUpdate
from conftest import ctx_for, Factory

def test_tags_accept_comma_separated_string():
    body = ResourceCreate(title="Map", type="guideline", content="...", tags="fire, exits ,,drill")
    assert body.tags == ["fire", "exits", "drill"]

def test_create_and_update_resource(db, school):
    ctx = ctx_for(school["director"])
    created = service.create_resource(
        db, ctx, ResourceCreate(title="Earthquake kit", type="article", content="Water, torch", tags=["kit"])
    )
    assert created["tenant_id"] == school["tenant"].id
    assert created["creator"]["id"] == school["director"].id

    updated = service.update_resource(db, ctx, created["id"], ResourceUpdate(title="Go bag"))
    assert updated["title"] == "Go bag"
    assert updated["tags"] == ["kit"]

def test_second_completion_is_rejected(db, make, school):
    resource = make.resource(school["tenant"], school["director"])
    ctx = ctx_for(school["student"])

    first = service.complete_resource(db, ctx, resource.id, time_spent=120)
    assert first["time_spent"] == 120
    assert first["resource"]["id"] == resource.id

    with pytest.raises(Conflict, match="already completed"):
        service.complete_resource(db, ctx, resource.id)
    assert db.query(ResourceCompletion).count() == 1

def test_unique_constraint_backs_up_the_check(db, make, school, monkeypatch):
    resource = make.resource(school["tenant"], school["director"])
    student = school["student"]
    db.add(ResourceCompletion(resource_id=resource.id, student_id=student.id))
    db.commit()

    # simulate a racing request that passed the existence check
    original_query = db.query
    calls = {"n": 0}

    def racing_query(*entities):
        query = original_query(*entities)
        if entities == (ResourceCompletion,) and calls["n"] == 0:
            calls["n"] += 1
            return original_query(ResourceCompletion).filter(ResourceCompletion.id < 0)
        return query

    monkeypatch.setattr(db, "query", racing_query)
    with pytest.raises(Conflict):
        service.complete_resource(db, ctx_for(student), resource.id)
    monkeypatch.undo()
    assert db.query(ResourceCompletion).count() == 1

def test_complete_resource_of_other_tenant(db, make, school):
    elsewhere = make.tenant()
    resource = make.resource(elsewhere, make.user(elsewhere, "director"))
    with pytest.raises(NotFound):
        service.complete_resource(db, ctx_for(school["student"]), resource.id)

def test_delete_resource_cascades_completions(db, make, school):
    resource = make.resource(school["tenant"], school["director"])
    kept = make.resource(school["tenant"], school["director"])
    service.complete_resource(db, ctx_for(school["student"]), resource.id)
    service.complete_resource(db, ctx_for(school["other_student"]), resource.id)
    service.complete_resource(db, ctx_for(school["student"]), kept.id)

    service.delete_resource(db, ctx_for(school["director"]), resource.id)

    remaining = db.query(ResourceCompletion).all()
    assert [c.resource_id for c in remaining] == [kept.id]
    with pytest.raises(NotFound):
        service.get_tenant_resource(db, ctx_for(school["director"]), resource.id)

def test_student_history_includes_resource_and_quiz_details(db, make, school):
    student = school["student"]
    resource = make.resource(school["tenant"], school["director"], title="Flood plan")
    quiz = make.quiz(school["tenant"], school["teacher"], title="Flood quiz")
    service.complete_resource(db, ctx_for(student), resource.id)
    engine.submit_quiz(db, ctx_for(student), quiz.id, [{"selectedAnswer": 0}])

    completions = service.student_completions(db, student.id)
    submissions = engine.student_submissions(db, student.id)

    assert completions[0]["resource"]["title"] == "Flood plan"
    assert submissions[0]["quiz"]["title"] == "Flood quiz"
    assert submissions[0]["score"] == 25

@pytest.fixture
def fk_db():
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)

    @event.listens_for(engine, "connect")
    def enforce_foreign_keys(dbapi_connection, connection_record):
        dbapi_connection.execute("PRAGMA foreign_keys=ON")

    init_db(bind=engine)
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()

def test_delete_resource_unlinks_quizzes(fk_db):
    make = Factory(fk_db)
    tenant = make.tenant()
    director = make.user(tenant, "director")
    teacher = make.user(tenant, "teacher")
    resource = make.resource(tenant, director)
    quiz = make.quiz(tenant, teacher, resource_id=resource.id)

    service.delete_resource(fk_db, ctx_for(director), resource.id)

    fk_db.refresh(quiz)
    assert quiz.resource_id is None
    assert fk_db.get(Quiz, quiz.id) is not None
