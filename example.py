import logging

from bson import ObjectId
from pymongo import MongoClient

from document_framework import Document, EmbeddedDocument, FieldKind, Repository
from document_framework.storages.mongo import MongoRepo


logging.basicConfig(level=logging.DEBUG)


class Subscription(EmbeddedDocument):
    schema = {"plan_id": FieldKind.IDENTIFIER, "tier": FieldKind.NUMERIC}


class Subscriber(Document):
    schema = {"subscription": Subscription}

    def subscribe(self, plan_id: str, plan_tier: int) -> None:
        if not self.get_attribute("subscription"):
            self["subscription"] = {"plan_id": plan_id, "tier": plan_tier, "cancelled": False}

    def cancel(self) -> None:
        if self.get_attribute("subscription"):
            self["subscription"]["cancelled"] = True


class SubscriberRepo(MongoRepo, Repository[Subscriber, ObjectId]):
    pass


client = MongoClient("mongodb://localhost:27017")
repo = SubscriberRepo(client.get_database("plays"))

subscriber = Subscriber({"name": "Seba", "status": "NEW"})
subscriber.subscribe(plan_id=str(ObjectId()), plan_tier=1)
repo.save(subscriber)

got_subscriber = repo.get(subscriber.id)
assert got_subscriber.to_dict() == subscriber.to_dict(), f"\n{got_subscriber}\n{subscriber}"

subscriber.cancel()
print(subscriber.get_dirty())  # {'subscription': {'cancelled': True}}
repo.save(subscriber)

repo.delete(subscriber)
client.close()
