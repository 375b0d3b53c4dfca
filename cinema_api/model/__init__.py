from cinema_api.model.movie import Genre, Movie, movie_genres
from cinema_api.model.purchase import Purchase, PurchaseSeat
from cinema_api.model.setting import Setting
from cinema_api.model.theatre import Cinema, Hall, Showtime

__all__ = [
    "Cinema",
    "Genre",
    "Hall",
    "Movie",
    "Purchase",
    "PurchaseSeat",
    "Setting",
    "Showtime",
    "movie_genres",
]
