import io
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from sqlite_support import make_session_factory

from app.core.config import settings
from app.db.models import ClassificationEnum, Movie
from app.schemas.movies import CreateMovieRequest, UpdateMovieRequest
from app.services.category_service import (
    CategoryNotFoundError,
    DuplicateCategoryError,
    category_exists,
    category_name_exists,
    create_category,
    delete_category,
    get_category,
    list_categories,
    update_category,
)
from app.services.image_service import InvalidImageError
from app.services.movie_service import (
    DuplicateMovieError,
    MovieNotFoundError,
    count_movies,
    create_movie,
    delete_movie,
    get_movie,
    list_movies,
    list_movies_by_category,
    search_movies,
    total_pages,
    update_movie,
)


def _movie_payload(category_id: int, **overrides) -> CreateMovieRequest:
    fields = {
        "name": "Arrival",
        "description": "Linguist meets heptapods.",
        "duration": 116,
        "classification": ClassificationEnum.THIRTEEN,
        "category_id": category_id,
    }
    fields.update(overrides)
    return CreateMovieRequest(**fields)


class _DbTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.db = make_session_factory()()
        self.addCleanup(self.db.close)

        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.static_dir = Path(self._tmp.name)
        patcher = patch.object(settings, "STATIC_DIR", str(self.static_dir))
        patcher.start()
        self.addCleanup(patcher.stop)


class TestCategoryService(_DbTestCase):
    def test_list_is_ordered_by_name(self) -> None:
        for name in ("Thriller", "Action", "Drama"):
            create_category(self.db, name)

        self.assertEqual(
            [c.name for c in list_categories(self.db)],
            ["Action", "Drama", "Thriller"],
        )

    def test_create_sets_timestamp_and_rejects_duplicates(self) -> None:
        category = create_category(self.db, "Drama")
        self.assertIsNotNone(category.id)
        self.assertIsNotNone(category.created_at)
        self.assertTrue(category_exists(self.db, category.id))

        with self.assertRaises(DuplicateCategoryError):
            create_category(self.db, "drama")

    def test_update_renames_but_keeps_created_at(self) -> None:
        category = create_category(self.db, "Dram")
        created_at = category.created_at

        updated = update_category(self.db, category.id, "Drama")
        self.assertEqual(updated.name, "Drama")
        self.assertEqual(updated.created_at, created_at)

    def test_update_same_name_is_allowed_but_collision_is_not(self) -> None:
        drama = create_category(self.db, "Drama")
        create_category(self.db, "Comedy")

        update_category(self.db, drama.id, "Drama")
        self.assertFalse(category_name_exists(self.db, "Drama", exclude_id=drama.id))
        with self.assertRaises(DuplicateCategoryError):
            update_category(self.db, drama.id, "Comedy")

    def test_update_and_delete_missing(self) -> None:
        with self.assertRaises(CategoryNotFoundError):
            update_category(self.db, 404, "Anything")
        with self.assertRaises(CategoryNotFoundError):
            delete_category(self.db, 404)

    def test_delete_removes_movies_and_images(self) -> None:
        category = create_category(self.db, "Sci-Fi")
        movie = create_movie(
            self.db,
            _movie_payload(category.id),
            image=io.BytesIO(b"img"),
            image_filename="arrival.jpg",
        )
        stored = self.static_dir / movie.image_local_path
        self.assertTrue(stored.exists())

        delete_category(self.db, category.id)

        self.assertIsNone(get_category(self.db, category.id))
        self.assertEqual(count_movies(self.db), 0)
        self.assertFalse(stored.exists())


class TestMovieService(_DbTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.category = create_category(self.db, "Sci-Fi")

    def _add(self, name: str, **overrides) -> Movie:
        return create_movie(self.db, _movie_payload(self.category.id, name=name, **overrides))

    def test_pagination_is_ordered_offset_limit(self) -> None:
        for name in ("Dune", "Alien", "Contact", "Blade Runner", "Everything"):
            self._add(name)

        self.assertEqual(count_movies(self.db), 5)
        self.assertEqual([m.name for m in list_movies(self.db, 1, 2)], ["Alien", "Blade Runner"])
        self.assertEqual([m.name for m in list_movies(self.db, 3, 2)], ["Everything"])
        self.assertEqual(list_movies(self.db, 4, 2), [])
        self.assertEqual(total_pages(5, 2), 3)
        self.assertEqual(total_pages(0, 2), 0)

    def test_search_is_case_insensitive_substring(self) -> None:
        self._add("The Matrix")
        self._add("Matrix Reloaded")
        self._add("Inception")

        self.assertEqual(
            [m.name for m in search_movies(self.db, "MATRIX")],
            ["Matrix Reloaded", "The Matrix"],
        )
        self.assertEqual(len(search_movies(self.db, "")), 3)
        self.assertEqual(len(search_movies(self.db, None)), 3)
        self.assertEqual(search_movies(self.db, "100%"), [])

    def test_search_spaces_are_part_of_the_term(self) -> None:
        self._add("The Matrix")
        self._add("Inception")

        self.assertEqual([m.name for m in search_movies(self.db, " ")], ["The Matrix"])
        self.assertEqual(search_movies(self.db, "   "), [])

    def test_by_category(self) -> None:
        other = create_category(self.db, "Drama")
        self._add("Arrival")
        create_movie(self.db, _movie_payload(other.id, name="Moonlight"))

        self.assertEqual([m.name for m in list_movies_by_category(self.db, other.id)], ["Moonlight"])
        with self.assertRaises(CategoryNotFoundError):
            list_movies_by_category(self.db, 999)

    def test_create_defaults_to_placeholder_image(self) -> None:
        movie = self._add("Arrival")
        self.assertEqual(movie.image_path, settings.DEFAULT_MOVIE_IMAGE_URL)
        self.assertIsNone(movie.image_local_path)

        external = self._add("Alien", image_path="https://img.example.com/alien.jpg")
        self.assertEqual(external.image_path, "https://img.example.com/alien.jpg")

    def test_create_rejects_duplicate_name_and_unknown_category(self) -> None:
        self._add("Arrival")
        with self.assertRaises(DuplicateMovieError):
            self._add("ARRIVAL")
        with self.assertRaises(CategoryNotFoundError):
            create_movie(self.db, _movie_payload(999, name="Orphan"))

    def test_create_with_bad_image_leaves_nothing_behind(self) -> None:
        with self.assertRaises(InvalidImageError):
            create_movie(
                self.db,
                _movie_payload(self.category.id),
                image=io.BytesIO(b"x"),
                image_filename="virus.exe",
            )
        self.assertEqual(count_movies(self.db), 0)

    def test_update_replaces_stored_image(self) -> None:
        movie = create_movie(
            self.db,
            _movie_payload(self.category.id),
            image=io.BytesIO(b"old"),
            image_filename="old.png",
        )
        old_file = self.static_dir / movie.image_local_path

        updated = update_movie(
            self.db,
            UpdateMovieRequest(
                id=movie.id,
                name="Arrival (2016)",
                duration=118,
                classification=ClassificationEnum.SIXTEEN,
                category_id=self.category.id,
            ),
            image=io.BytesIO(b"new"),
            image_filename="new.webp",
        )

        self.assertEqual(updated.name, "Arrival (2016)")
        self.assertEqual(updated.duration, 118)
        self.assertEqual(updated.classification, ClassificationEnum.SIXTEEN)
        self.assertFalse(old_file.exists())
        self.assertEqual((self.static_dir / updated.image_local_path).read_bytes(), b"new")

    def test_update_without_image_keeps_existing_one(self) -> None:
        movie = self._add("Arrival", image_path="https://img.example.com/a.jpg")
        updated = update_movie(
            self.db,
            UpdateMovieRequest(
                id=movie.id,
                name="Arrival",
                duration=100,
                classification=ClassificationEnum.SEVEN,
                category_id=self.category.id,
            ),
        )
        self.assertEqual(updated.image_path, "https://img.example.com/a.jpg")

    def test_update_errors(self) -> None:
        self._add("Alien")
        movie = self._add("Arrival")
        base = {
            "duration": 100,
            "classification": ClassificationEnum.SEVEN,
            "category_id": self.category.id,
        }

        with self.assertRaises(MovieNotFoundError):
            update_movie(self.db, UpdateMovieRequest(id=999, name="X", **base))
        with self.assertRaises(DuplicateMovieError):
            update_movie(self.db, UpdateMovieRequest(id=movie.id, name="alien", **base))
        with self.assertRaises(CategoryNotFoundError):
            update_movie(
                self.db,
                UpdateMovieRequest(id=movie.id, name="Arrival", **{**base, "category_id": 999}),
            )

    def test_delete_removes_row_and_image(self) -> None:
        movie = create_movie(
            self.db,
            _movie_payload(self.category.id),
            image=io.BytesIO(b"img"),
            image_filename="a.gif",
        )
        stored = self.static_dir / movie.image_local_path

        delete_movie(self.db, movie.id)

        self.assertIsNone(get_movie(self.db, movie.id))
        self.assertFalse(stored.exists())
        with self.assertRaises(MovieNotFoundError):
            delete_movie(self.db, movie.id)
