from .models import StoreSettings


def store_settings(request):
    """Make store name and currency available to all templates"""
    if not request.user.is_authenticated:
        return {}

    settings_row = StoreSettings.load()
    return {
        'store_settings': settings_row,
        'currency_symbol': settings_row.currency_symbol,
    }
