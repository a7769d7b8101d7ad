import json

from django.db.models import Count

from landApp.models import LandListing
from orderApp.models import Order

CHAT_TYPES = ('trending', 'health', 'farmer', 'admin')

DEFAULT_PROMPT = "You are a helpful AI assistant for GrowShare, a platform connecting users with farmers."


def vegetable_demand():
    """Order counts per vegetable, most ordered first"""
    rows = (
        Order.objects.values('vegetable_name')
        .annotate(orders=Count('id'))
        .order_by('-orders', 'vegetable_name')
    )
    return {row['vegetable_name']: row['orders'] for row in rows}


def available_vegetables():
    names = set()
    for supported in LandListing.objects.visible().values_list('supported_vegetables', flat=True):
        names.update(name.strip() for name in supported or [] if name.strip())
    return sorted(names, key=str.lower)


def default_context(chat_type):
    if chat_type == 'health':
        return {'vegetables': available_vegetables()}
    if chat_type == 'admin':
        return {
            'vegetable_demand': vegetable_demand(),
            'total_orders': Order.objects.count(),
            'orders_by_status': dict(
                Order.objects.values_list('status').annotate(total=Count('id')).order_by()
            ),
        }
    return {'vegetable_demand': vegetable_demand()}


def build_system_prompt(chat_type, context):
    data = json.dumps(context or {}, default=str)

    if chat_type == 'trending':
        return (
            "You are a vegetable trends AI assistant for GrowShare platform.\n"
            "You analyze vegetable ordering patterns and provide insights about:\n"
            "- Which vegetables are most popular\n"
            "- Trending vegetables based on recent orders\n"
            "- Seasonal recommendations\n"
            "- Demand patterns\n\n"
            f"Current database context: {data}\n\n"
            "Be concise, helpful, and focus on vegetable trends. Use emojis occasionally for friendliness."
        )
    if chat_type == 'health':
        vegetables = json.dumps((context or {}).get('vegetables', []))
        return (
            "You are a health and nutrition AI advisor for GrowShare platform.\n"
            "You help users understand:\n"
            "- Health benefits of different vegetables\n"
            "- Which vegetables are good for specific health conditions (diabetes, blood pressure, digestion, etc.)\n"
            "- Nutritional information\n"
            "- Personalized vegetable recommendations\n\n"
            f"Available vegetables on platform: {vegetables}\n\n"
            "Be caring, informative, and provide evidence-based advice. "
            "Always recommend consulting a doctor for medical advice."
        )
    if chat_type == 'farmer':
        return (
            "You are a farming assistant AI for GrowShare platform.\n"
            "You help farmers by:\n"
            "- Showing trending vegetables users want\n"
            "- Suggesting which vegetables to grow based on demand\n"
            "- Providing platform usage tips\n"
            "- Answering farming-related questions\n\n"
            f"Current trends data: {data}\n\n"
            "Be practical, helpful, and farmer-friendly. Focus on actionable insights."
        )
    if chat_type == 'admin':
        return (
            "You are an admin analytics AI for GrowShare platform.\n"
            "You provide insights about:\n"
            "- Overall platform trends\n"
            "- User and farmer activity overview\n"
            "- Vegetable demand across the platform\n"
            "- Business insights\n\n"
            f"Platform data: {data}\n\n"
            "Be professional, data-driven, and provide actionable insights."
        )
    return DEFAULT_PROMPT
