"""
models/settings.py
------------------
Hard-coded baseline settings: returned for categories that were never
saved, and written back by "reset to defaults".
"""

SETTINGS_CATEGORIES: tuple[str, ...] = (
    "general", "notifications", "security", "products",
    "shipping", "layout", "currencies", "languages",
)

DEFAULT_SETTINGS: dict = {
    "general": {
        "siteName": "Herbal Shop",
        "siteDescription": "Your one-stop shop for herbal products",
        "contactEmail": "contact@herbalshop.com",
        "supportPhone": "+94 77 123 4567",
        "address": "123 Green Lane, Colombo, Sri Lanka",
        "currency": "LKR",
        "language": "en",
        "logo": "/logo.png",
        "favicon": "/favicon.ico",
    },
    "notifications": {
        "emailNotifications": True,
        "orderUpdates": True,
        "stockAlerts": True,
        "newCustomers": False,
        "marketingEmails": False,
    },
    "security": {
        "twoFactorAuth": False,
        "requireStrongPasswords": True,
        "sessionTimeout": 60,
        "maxLoginAttempts": 5,
    },
    "products": {
        "showOutOfStock": True,
        "enableReviews": True,
        "moderateReviews": True,
        "enableWishlist": True,
        "enableComparisons": False,
        "productsPerPage": 12,
        "defaultSorting": "newest",
    },
    "shipping": {
        "freeShippingThreshold": 5000,
        "defaultShippingFee": 350,
        "enableInternational": False,
        "taxRate": 8,
        "shippingZones": [
            {"name": "Local (Colombo)", "fee": 250},
            {"name": "Nearby Districts", "fee": 350},
            {"name": "Other Areas", "fee": 450},
            {"name": "Remote Areas", "fee": 550},
        ],
        "expressDeliveryFee": 800,
        "standardDeliveryTime": "2-3 days",
        "expressDeliveryTime": "24 hours",
    },
    "layout": {
        "theme": "light",
        "primaryColor": "#10b981",
        "secondaryColor": "#6366f1",
        "headerLayout": "standard",
        "footerLayout": "standard",
        "productLayout": "grid",
        "homepageLayout": "featured",
        "sidebarPosition": "left",
        "showRecentlyViewed": True,
        "showRelatedProducts": True,
    },
    "currencies": {
        "active": "LKR",
        "available": [
            {"code": "LKR", "symbol": "Rs", "name": "Sri Lankan Rupee", "rate": 320.5},
            {"code": "USD", "symbol": "$", "name": "US Dollar", "rate": 1},
            {"code": "EUR", "symbol": "€", "name": "Euro", "rate": 0.92},
            {"code": "GBP", "symbol": "£", "name": "British Pound", "rate": 0.79},
            {"code": "INR", "symbol": "₹", "name": "Indian Rupee", "rate": 83.1},
        ],
        "showCurrencySelector": True,
        "updatePricesAutomatically": True,
    },
    "languages": {
        "active": "en",
        "available": [
            {"code": "en", "name": "English"},
            {"code": "si", "name": "Sinhala"},
            {"code": "ta", "name": "Tamil"},
        ],
        "showLanguageSelector": True,
        "translateProductDescriptions": False,
    },
}
