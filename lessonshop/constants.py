SUBJECT_ICONS = {
    "Math": "fas fa-calculator",
    "English": "fas fa-book-open",
    "Music": "fas fa-music",
    "Art": "fas fa-palette",
    "Science": "fas fa-flask",
    "History": "fas fa-landmark",
    "Geography": "fas fa-globe",
    "Sports": "fas fa-running",
}
DEFAULT_ICON = "fas fa-star"

# поля, по которым можно сортировать витрину
SORT_FIELDS = ("subject", "location", "price", "spaces")
SORT_ASC = "asc"
SORT_DESC = "desc"
DEFAULT_SORT_FIELD = "subject"

# витрина без бэкенда (CATALOG_SOURCE=static)
STATIC_LESSONS = [
    {"id": 1, "subject": "Math", "location": "London", "price": 100, "spaces": 5},
    {"id": 2, "subject": "English", "location": "London", "price": 100, "spaces": 5},
    {"id": 3, "subject": "Math", "location": "Oxford", "price": 100, "spaces": 5},
    {"id": 4, "subject": "English", "location": "York", "price": 80, "spaces": 5},
    {"id": 5, "subject": "Music", "location": "Bristol", "price": 90, "spaces": 5},
    {"id": 6, "subject": "Art", "location": "London", "price": 110, "spaces": 5},
    {"id": 7, "subject": "Science", "location": "Manchester", "price": 95, "spaces": 5},
    {"id": 8, "subject": "History", "location": "Cambridge", "price": 85, "spaces": 5},
    {"id": 9, "subject": "Geography", "location": "Edinburgh", "price": 90, "spaces": 5},
    {"id": 10, "subject": "Sports", "location": "Birmingham", "price": 75, "spaces": 5},
]
