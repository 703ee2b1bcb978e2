"""Seed a local forum database with members, articles, comments, replies and reactions."""
import asyncio
import argparse
import random
import time

from forum.database import engine, async_session, Base
from forum.models import new_article, new_comment, new_member, new_reaction, new_reply
from forum.security import get_token_provider

PHRASES = [
    "Walked the ridge trail this morning",
    "The pines smell incredible after rain",
    "Anyone know where the old cabin went?",
    "Saw a heron by the creek today",
    "Fog rolled in before noon",
    "First frost on the meadow",
]


async def seed(small: bool = False):
    num_members = 5 if small else 30
    num_articles = 20 if small else 500
    max_comments = 3 if small else 8
    max_replies = 2 if small else 4

    print(f"Seeding: {num_members} members, {num_articles} articles")
    start = time.perf_counter()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    totals = {"comments": 0, "replies": 0, "reactions": 0}

    async with async_session() as session:
        members = [
            new_member(f"member_{i:03d}@example.com", f"member_{i:03d}")
            for i in range(num_members)
        ]
        session.add_all(members)
        await session.flush()
        print(f"  Created {len(members)} members")

        for i in range(num_articles):
            article = new_article(f"{random.choice(PHRASES)} (#{i})", random.choice(members))
            session.add(article)
            await session.flush()

            for _ in range(random.randint(0, max_comments)):
                comment = new_comment(random.choice(PHRASES), article, random.choice(members))
                session.add(comment)
                await session.flush()
                totals["comments"] += 1

                for _ in range(random.randint(0, max_replies)):
                    session.add(new_reply(random.choice(PHRASES), comment, random.choice(members)))
                    totals["replies"] += 1

            # One reaction per member per article.
            for member in random.sample(members, k=random.randint(0, len(members) // 2)):
                session.add(new_reaction(member, article))
                totals["reactions"] += 1

        await session.commit()

    elapsed = time.perf_counter() - start
    print(f"\nSeeding complete in {elapsed:.1f}s")
    print(f"  Articles: {num_articles}")
    for name, count in totals.items():
        print(f"  {name.capitalize()}: {count}")

    provider = get_token_provider()
    print("\nBearer tokens:")
    for member in members[:5]:
        print(f"  {member.nickname}: {provider.create_access_token(member.id, member.nickname)}")


def main():
    parser = argparse.ArgumentParser(description="Seed the forum database")
    parser.add_argument("--small", action="store_true", help="Use a small dataset (20 articles)")
    args = parser.parse_args()
    asyncio.run(seed(small=args.small))


if __name__ == "__main__":
    main()
