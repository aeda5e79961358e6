"""CLI script to manually trigger course syncs."""
from __future__ import annotations

import argparse

from app.tasks.sync import sync_all_courses, sync_course


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Manually sync Stepik course activity into daily metrics",
    )
    parser.add_argument(
        "--course-id",
        type=str,
        help="Sync one tracked course (internal UUID) instead of all enabled courses",
    )
    parser.add_argument(
        "--async",
        action="store_true",
        dest="use_async",
        help="Queue task asynchronously instead of running immediately",
    )

    args = parser.parse_args()

    if args.course_id:
        print(f"Syncing course {args.course_id}")
        if args.use_async:
            task = sync_course.apply_async(args=(args.course_id,))
            print(f"Task queued: {task.id}")
        else:
            result = sync_course.run(args.course_id)
            print(f"Result: {result}")
    else:
        print("Syncing all enabled courses")
        if args.use_async:
            task = sync_all_courses.apply_async()
            print(f"Task queued: {task.id}")
        else:
            result = sync_all_courses.run()
            print(f"Result: {result}")


if __name__ == "__main__":
    main()
