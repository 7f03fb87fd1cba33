# ai business insights for the dashboard
# optional: with no api key or a failed call the owner sees a fixed message instead

import json
import logging

from flask import current_app
from google import genai

logger = logging.getLogger(__name__)

NO_KEY_MESSAGE = 'AI Insights are currently unavailable. Please check system configuration.'
FAILED_MESSAGE = 'Could not generate insights at this moment. Please check your connectivity.'
EMPTY_MESSAGE = 'No actionable insights found based on current data.'


def build_prompt(products, sales):
    stock = [{'brand': p.brand, 'model': p.model, 'stock': p.stock_quantity, 'price': p.selling_price}
             for p in products]
    recent = [{'product': s.product_name, 'qty': s.quantity, 'total': s.total_amount}
              for s in sales[-10:]]
    return (
        'Analyze this spectacles business data and provide 3-4 concise, actionable business insights.\n\n'
        f'Inventory: {json.dumps(stock)}\n'
        f'Recent Sales: {json.dumps(recent)}\n\n'
        'Format the output as a friendly summary for an owner. '
        'Focus on stock optimization, popular items, or pricing suggestions.'
    )


def summarize(products, sales, client=None):
    """Return a short narrative about the shop data. Never raises."""
    api_key = current_app.config.get('GEMINI_API_KEY')
    if client is None and not api_key:
        logger.warning('Gemini API key is missing, insights disabled')
        return NO_KEY_MESSAGE

    try:
        if client is None:
            client = genai.Client(api_key=api_key)
        response = client.models.generate_content(
            model=current_app.config.get('GEMINI_MODEL', 'gemini-2.5-flash'),
            contents=build_prompt(products, sales),
        )
    except Exception:
        logger.exception('Gemini insights request failed')
        return FAILED_MESSAGE
    return (getattr(response, 'text', None) or '').strip() or EMPTY_MESSAGE
