"""Populate a local FitQuest database with users, categories and articles."""
import argparse
import asyncio
import random
import time

from app.database import Base, async_session, engine
from app.models import Article, Category, User

CATEGORIES = ["Cardio", "Strength", "Mobility", "Nutrition", "Recovery", "Running", "Yoga"]

TOPICS = ["interval training", "progressive overload", "hip mobility", "protein timing",
          "sleep hygiene", "tempo runs", "breathing drills", "deload weeks"]


async def seed(users: int, articles: int, reset: bool) -> None:
    print(f"Seeding: {users} users, up to {len(CATEGORIES)} categories each, {articles} articles")
    start = time.perf_counter()

    async with engine.begin() as conn:
        if reset:
            await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    async with async_session() as session:
        owners = [User(username=f"athlete_{i:03d}") for i in range(users)]
        session.add_all(owners)
        await session.flush()

        # Every third user keeps an empty category list, exercising the 404 path.
        categories_by_user: dict[int, list[Category]] = {}
        for index, owner in enumerate(owners):
            if index % 3 == 2:
                categories_by_user[owner.id] = []
                continue
            names = random.sample(CATEGORIES, k=random.randint(1, len(CATEGORIES)))
            owned = [Category(name=name, user_id=owner.id) for name in names]
            session.add_all(owned)
            categories_by_user[owner.id] = owned
        await session.flush()
        print(f"  Created {sum(len(c) for c in categories_by_user.values())} categories")

        for i in range(articles):
            owner = random.choice(owners)
            owned = categories_by_user[owner.id]
            topic = random.choice(TOPICS)
            session.add(Article(
                title=f"Notes on {topic} #{i}",
                content=f"How {owner.username} approaches {topic}. " * 10,
                user_id=owner.id,
                category_id=random.choice(owned).id if owned else None,
            ))
        await session.commit()

    print(f"Seeding complete in {time.perf_counter() - start:.1f}s")


def main():
    parser = argparse.ArgumentParser(description="Seed the FitQuest database")
    parser.add_argument("--users", type=int, default=10)
    parser.add_argument("--articles", type=int, default=100)
    parser.add_argument("--reset", action="store_true", help="Drop all tables first")
    args = parser.parse_args()
    asyncio.run(seed(args.users, args.articles, args.reset))


if __name__ == "__main__":
    main()
