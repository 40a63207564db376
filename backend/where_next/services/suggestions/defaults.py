"""Hardcoded last-resort suggestions."""

from where_next.models import HotelBand, PriceBand, SuggestionRecord, Weather

DEFAULT_SUGGESTIONS: tuple[SuggestionRecord, ...] = (
    SuggestionRecord(
        id="1",
        destination="Lisbon, Portugal",
        country="Portugal",
        city="Lisbon",
        fit_score=92,
        description="Historic charm meets modern culture in Portugal's vibrant capital",
        weather=Weather(temp=22, condition="Sunny", icon="☀️"),
        crowd_level="Medium",
        seasonality="Perfect weather, moderate crowds",
        estimated_total=1350,
        flight_band=PriceBand(min=650, max=780),
        hotel_band=HotelBand(min=90, max=130, style="Boutique", area="Alfama/Baixa"),
        highlights=["Historic tram rides", "Pasteis de Belém", "Fado music", "Time Out Market"],
        why_it_fits="Perfect for food lovers with amazing local cuisine and cultural experiences",
    ),
    SuggestionRecord(
        id="2",
        destination="Barcelona, Spain",
        country="Spain",
        city="Barcelona",
        fit_score=88,
        description="Vibrant city with stunning architecture and Mediterranean charm",
        weather=Weather(temp=24, condition="Warm", icon="🌤️"),
        crowd_level="High",
        seasonality="Peak season, book early",
        estimated_total=1850,
        flight_band=PriceBand(min=720, max=890),
        hotel_band=HotelBand(min=120, max=180, style="Modern", area="Gothic Quarter"),
        highlights=["Sagrada Familia", "Gaudí architecture", "Beach life", "Tapas culture"],
        why_it_fits="Ideal for culture and architecture enthusiasts with an amazing food scene",
    ),
    SuggestionRecord(
        id="3",
        destination="Porto, Portugal",
        country="Portugal",
        city="Porto",
        fit_score=85,
        description="Authentic Portuguese charm with world-famous port wine",
        weather=Weather(temp=20, condition="Mild", icon="🌦️"),
        crowd_level="Low",
        seasonality="Shoulder season, great deals",
        estimated_total=1100,
        flight_band=PriceBand(min=580, max=720),
        hotel_band=HotelBand(min=70, max=110, style="Historic", area="Ribeira"),
        highlights=["Port wine tasting", "Historic center", "River views", "Authentic cuisine"],
        why_it_fits="Great value destination perfect for wine lovers and authentic experiences",
    ),
    SuggestionRecord(
        id="4",
        destination="Seville, Spain",
        country="Spain",
        city="Seville",
        fit_score=90,
        description="Passionate flamenco culture meets stunning Moorish architecture",
        weather=Weather(temp=26, condition="Sunny", icon="☀️"),
        crowd_level="Medium",
        seasonality="Excellent weather, moderate tourism",
        estimated_total=1400,
        flight_band=PriceBand(min=680, max=820),
        hotel_band=HotelBand(min=85, max=125, style="Traditional", area="Santa Cruz Quarter"),
        highlights=["Alcázar Palace", "Flamenco shows", "Cathedral & Giralda", "Tapas tours"],
        why_it_fits="Perfect for culture lovers seeking authentic Spanish traditions",
    ),
)


def default_suggestions() -> list[SuggestionRecord]:
    return [s.model_copy(deep=True) for s in DEFAULT_SUGGESTIONS]
