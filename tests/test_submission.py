import asyncio

import pytest

from conftest import InMemoryPropertyRepository
from workspot.database import ImageStorage, ImageUpload
from workspot.errors import AccessDenied, PredictionUnavailable, QueryFailed, ValidationError
from workspot.listings import ListingSubmission
from workspot.prediction import PredictionClient, PredictionResult

OFFICE_FORM = {"propertyType": "office_rent", "city": "Mumbai", "floor_size": "5000", "lift": True}


@pytest.fixture
def prediction(mocker):
    client = mocker.AsyncMock(spec=PredictionClient)

    async def slow_predict(attributes):
        await asyncio.sleep(0)
        return PredictionResult(predicted_price=55000, family=attributes.family)

    client.predict.side_effect = slow_predict
    return client


@pytest.fixture
def storage(mocker):
    fake = mocker.Mock(spec=ImageStorage)
    fake.put.side_effect = lambda image, prefix: f"{prefix}/{image.filename}"
    fake.download_url.side_effect = lambda path: f"https://cdn.test/{path}"
    return fake


@pytest.fixture
def repo():
    return InMemoryPropertyRepository()


@pytest.fixture
def submission(seller, repo, prediction, storage):
    return ListingSubmission(seller, repo, prediction, storage)


async def ready(submission):
    submission.set_attributes(OFFICE_FORM)
    submission.set_details(title="  BKC office ", description="Sea view", address="G Block")
    await submission.request_prediction()
    return submission


async def test_double_upload_creates_one_property(submission, repo):
    await ready(submission)

    first, second = await asyncio.gather(submission.upload(), submission.upload())

    assert repo.calls["create"] == 1
    assert first is not None
    assert second is None


async def test_double_prediction_calls_service_once(submission, prediction):
    submission.set_attributes(OFFICE_FORM)

    first, second = await asyncio.gather(
        submission.request_prediction(), submission.request_prediction()
    )

    assert prediction.predict.await_count == 1
    assert first.predicted_price == 55000
    assert second is None
    assert submission.predicted_price == 55000
    assert not submission.is_predicting


async def test_upload_creates_office_listing(submission, repo, storage):
    await ready(submission)
    submission.add_image(ImageUpload("front.jpg", b"\xff\xd8"))

    created = await submission.upload()

    assert created.id == repo.rows[0]["id"]
    assert created.type == "office_rent"
    assert created.location == "mumbai"
    assert created.title == "BKC office"
    assert created.price == 55000
    assert created.predicted_price == 55000
    assert created.office.floor_size == 5000
    assert created.office.amenities.lift
    assert created.image == "https://cdn.test/properties/u1/front.jpg"
    assert repo.rows[0]["property_details"]["floor_size"] == 5000
    assert "property_type" not in repo.rows[0]["property_details"]
    storage.put.assert_called_once()


async def test_form_is_reset_after_upload(submission):
    await ready(submission)

    await submission.upload()

    assert submission.attributes is None
    assert submission.title == ""
    assert submission.predicted_price is None
    assert not submission.is_submitting


async def test_seller_price_overrides_prediction(submission):
    await ready(submission)
    submission.set_details(price=60000)

    created = await submission.upload()

    assert created.price == 60000
    assert created.predicted_price == 55000


async def test_upload_requires_prediction(submission, repo):
    submission.set_attributes(OFFICE_FORM)
    submission.set_details(title="No prediction")

    with pytest.raises(PredictionUnavailable):
        await submission.upload()

    assert repo.calls["create"] == 0


async def test_changing_attributes_discards_prediction(submission, repo):
    await ready(submission)
    submission.set_attributes({**OFFICE_FORM, "floor_size": 8000})

    assert submission.predicted_price is None
    with pytest.raises(PredictionUnavailable):
        await submission.upload()


async def test_upload_requires_title(submission):
    await ready(submission)
    submission.set_details(title="   ")

    with pytest.raises(ValidationError):
        await submission.upload()


async def test_buyers_cannot_upload(buyer, repo, prediction, storage):
    submission = ListingSubmission(buyer, repo, prediction, storage)
    await ready(submission)

    with pytest.raises(AccessDenied):
        await submission.upload()

    assert repo.calls["create"] == 0


async def test_prediction_without_type_makes_no_call(seller, repo, storage, settings, mocker):
    client = PredictionClient(base_url="http://prediction.test", settings=settings)
    post = mocker.patch.object(client, "_post")
    submission = ListingSubmission(seller, repo, client, storage)

    with pytest.raises(ValidationError):
        submission.set_attributes({"city": "mumbai"})
    with pytest.raises(ValidationError):
        await submission.request_prediction()

    post.assert_not_called()
    assert not submission.is_predicting


async def test_late_prediction_ignored_after_discard(submission, prediction):
    async def predict_then_discard(attributes):
        await asyncio.sleep(0)
        submission.discard()
        return PredictionResult(predicted_price=55000, family=attributes.family)

    prediction.predict.side_effect = predict_then_discard
    submission.set_attributes(OFFICE_FORM)

    result = await submission.request_prediction()

    assert result is None
    assert submission.prediction is None


async def test_store_failure_keeps_form(submission, repo):
    await ready(submission)
    repo.fail_on.add("create")

    with pytest.raises(QueryFailed):
        await submission.upload()

    assert submission.predicted_price == 55000
    assert not submission.is_submitting


async def test_prediction_for_edited_attributes_is_dropped(submission, prediction):
    release = asyncio.Event()

    async def held_predict(attributes):
        await release.wait()
        return PredictionResult(predicted_price=55000, family=attributes.family)

    prediction.predict.side_effect = held_predict
    submission.set_attributes(OFFICE_FORM)

    task = asyncio.create_task(submission.request_prediction())
    await asyncio.sleep(0)
    submission.set_attributes({**OFFICE_FORM, "floor_size": "90000"})
    release.set()

    assert await task is None
    assert submission.predicted_price is None
    assert submission.attributes.floor_size == 90000
    assert not submission.is_predicting


async def test_upload_publishes_form_as_it_was_when_called(submission, repo, storage):
    await ready(submission)
    submission.add_image(ImageUpload("front.jpg", b"\xff\xd8"))

    def put_then_edit(image, prefix):
        submission.set_attributes({**OFFICE_FORM, "floor_size": "90000"})
        submission.set_details(title="Edited later")
        return f"{prefix}/{image.filename}"

    storage.put.side_effect = put_then_edit

    created = await submission.upload()

    assert repo.calls["create"] == 1
    assert created.office.floor_size == 5000
    assert created.price == 55000
    assert created.title == "BKC office"
    # las ediciones posteriores quedan en el formulario
    assert submission.attributes.floor_size == 90000
    assert submission.predicted_price is None
