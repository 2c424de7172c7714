"""
LivePDF Viewer - Internationalization / Translations

Provides translations for 4 languages:
  English, Español, Français, Deutsch

Usage:
    from .translations import get_text
    text = get_text('reload', lang='Deutsch')
"""

import locale
import os

TRANSLATIONS = {
    'English': {
        'title': 'LivePDF Viewer',

        # File menu
        'file': 'File',
        'open': 'Open…',
        'open_file': 'Open PDF',
        'reload': 'Reload',
        'quit': 'Quit',
        'pdf_files': 'PDF files (*.pdf)',
        'all_files': 'All files',
        'cancel': 'Cancel',

        # View menu
        'view': 'View',
        'zoom_in': 'Zoom In',
        'zoom_out': 'Zoom Out',
        'reset_zoom': 'Reset Zoom',
        'fit_height': 'Fit Height',
        'fit_width': 'Fit Width',
        'fullscreen': 'Toggle Fullscreen',

        # Color scheme menu
        'color_scheme': 'Color Scheme',
        'theme_light': 'Light',
        'theme_dark': 'Dark',
        'theme_sepia': 'Sepia',
        'theme_custom': 'Custom Colors…',

        # Color picker
        'custom_colors': 'Custom Colors',
        'foreground': 'Text color',
        'background': 'Background color',
        'apply': 'Apply',
        'reset': 'Reset',
        'close': 'Close',

        # Status / messages
        'page': 'Page',
        'of_pages': 'of',
        'no_file': 'No document opened.',
        'error': 'Error',
        'load_failed': 'The document could not be opened.',
    },

    'Español': {
        'title': 'Visor LivePDF',

        'file': 'Archivo',
        'open': 'Abrir…',
        'open_file': 'Abrir PDF',
        'reload': 'Recargar',
        'quit': 'Salir',
        'pdf_files': 'Archivos PDF (*.pdf)',
        'all_files': 'Todos los archivos',
        'cancel': 'Cancelar',

        'view': 'Ver',
        'zoom_in': 'Acercar',
        'zoom_out': 'Alejar',
        'reset_zoom': 'Restablecer zoom',
        'fit_height': 'Ajustar al alto',
        'fit_width': 'Ajustar al ancho',
        'fullscreen': 'Pantalla completa',

        'color_scheme': 'Esquema de color',
        'theme_light': 'Claro',
        'theme_dark': 'Oscuro',
        'theme_sepia': 'Sepia',
        'theme_custom': 'Colores personalizados…',

        'custom_colors': 'Colores personalizados',
        'foreground': 'Color del texto',
        'background': 'Color de fondo',
        'apply': 'Aplicar',
        'reset': 'Restablecer',
        'close': 'Cerrar',

        'page': 'Página',
        'of_pages': 'de',
        'no_file': 'Ningún documento abierto.',
        'error': 'Error',
        'load_failed': 'No se pudo abrir el documento.',
    },

    'Français': {
        'title': 'Visionneuse LivePDF',

        'file': 'Fichier',
        'open': 'Ouvrir…',
        'open_file': 'Ouvrir un PDF',
        'reload': 'Recharger',
        'quit': 'Quitter',
        'pdf_files': 'Fichiers PDF (*.pdf)',
        'all_files': 'Tous les fichiers',
        'cancel': 'Annuler',

        'view': 'Affichage',
        'zoom_in': 'Zoom avant',
        'zoom_out': 'Zoom arrière',
        'reset_zoom': 'Réinitialiser le zoom',
        'fit_height': 'Ajuster à la hauteur',
        'fit_width': 'Ajuster à la largeur',
        'fullscreen': 'Plein écran',

        'color_scheme': 'Jeu de couleurs',
        'theme_light': 'Clair',
        'theme_dark': 'Sombre',
        'theme_sepia': 'Sépia',
        'theme_custom': 'Couleurs personnalisées…',

        'custom_colors': 'Couleurs personnalisées',
        'foreground': 'Couleur du texte',
        'background': 'Couleur du fond',
        'apply': 'Appliquer',
        'reset': 'Réinitialiser',
        'close': 'Fermer',

        'page': 'Page',
        'of_pages': 'sur',
        'no_file': 'Aucun document ouvert.',
        'error': 'Erreur',
        'load_failed': "Le document n'a pas pu être ouvert.",
    },

    'Deutsch': {
        'title': 'LivePDF-Betrachter',

        'file': 'Datei',
        'open': 'Öffnen…',
        'open_file': 'PDF öffnen',
        'reload': 'Neu laden',
        'quit': 'Beenden',
        'pdf_files': 'PDF-Dateien (*.pdf)',
        'all_files': 'Alle Dateien',
        'cancel': 'Abbrechen',

        'view': 'Ansicht',
        'zoom_in': 'Vergrößern',
        'zoom_out': 'Verkleinern',
        'reset_zoom': 'Zoom zurücksetzen',
        'fit_height': 'An Höhe anpassen',
        'fit_width': 'An Breite anpassen',
        'fullscreen': 'Vollbild',

        'color_scheme': 'Farbschema',
        'theme_light': 'Hell',
        'theme_dark': 'Dunkel',
        'theme_sepia': 'Sepia',
        'theme_custom': 'Eigene Farben…',

        'custom_colors': 'Eigene Farben',
        'foreground': 'Textfarbe',
        'background': 'Hintergrundfarbe',
        'apply': 'Anwenden',
        'reset': 'Zurücksetzen',
        'close': 'Schließen',

        'page': 'Seite',
        'of_pages': 'von',
        'no_file': 'Kein Dokument geöffnet.',
        'error': 'Fehler',
        'load_failed': 'Das Dokument konnte nicht geöffnet werden.',
    },
}

DEFAULT_LANGUAGE = 'English'

_LANGUAGE_CODES = {
    'en': 'English',
    'es': 'Español',
    'fr': 'Français',
    'de': 'Deutsch',
}


def detect_system_language(environ=None):
    """Detect the UI language from the locale environment variables.

    Returns:
        The language name matching available translations, or 'English' as default.
    """
    if environ is None:
        environ = os.environ

    lang_code = None
    for var in ('LC_ALL', 'LC_MESSAGES', 'LANG', 'LANGUAGE'):
        lang_code = environ.get(var)
        if lang_code:
            break

    if not lang_code:
        try:
            lang_code, _ = locale.getlocale()
        except ValueError:
            lang_code = None

    if not lang_code:
        return DEFAULT_LANGUAGE

    # 'es_ES.UTF-8' -> 'es'
    lang_prefix = lang_code.split('_')[0].split('.')[0].lower()
    return _LANGUAGE_CODES.get(lang_prefix, DEFAULT_LANGUAGE)


def get_text(key, lang=None):
    """
    Retrieve a translated string for the given key and language.

    Args:
        key: The translation key to look up.
        lang: The language name (e.g. 'English', 'Deutsch').
              Falls back to DEFAULT_LANGUAGE if not found.

    Returns:
        The translated string, or the key itself if not found.
    """
    if lang is None:
        lang = DEFAULT_LANGUAGE
    lang_dict = TRANSLATIONS.get(lang, TRANSLATIONS[DEFAULT_LANGUAGE])
    return lang_dict.get(key, TRANSLATIONS[DEFAULT_LANGUAGE].get(key, key))


def available_languages():
    """Return a list of available language names."""
    return list(TRANSLATIONS.keys())
