#!/usr/bin/env python3
"""
Configuration Check
Verifies the Groq credentials and model locally before wiring up the action.

Reads a .env file from the repository root when present, otherwise the
process environment.
"""
import os
import sys
from pathlib import Path

from dotenv import load_dotenv
from groq import Groq, GroqError

from config_constants import MODEL_CONFIG_CHECK

ENV_FILE = Path(__file__).resolve().parent.parent / '.env'
REQUIRED_VARIABLES = ('GROQ_API_KEY',)
OPTIONAL_VARIABLES = ('MODEL', 'GITHUB_TOKEN')


def report_variables(environ) -> bool:
    """Print which variables are set; return True when all required ones are"""
    print('📋 Environment Variables Check:')
    for name in REQUIRED_VARIABLES:
        print(f"  {name}: {'✓ Set' if environ.get(name) else '❌ Missing'}")
    for name in OPTIONAL_VARIABLES:
        print(f"  {name}: {'✓ Set' if environ.get(name) else '– not set (optional)'}")
    print()
    return all(environ.get(name) for name in REQUIRED_VARIABLES)


def print_setup_help():
    print('📝 Option 1: Create a .env file in the project root:')
    print('GROQ_API_KEY=your-api-key-here')
    print(f'MODEL={MODEL_CONFIG_CHECK}')
    print('\n📝 Option 2: Set environment variables:')
    print('export GROQ_API_KEY="your-api-key-here"')
    print(f'export MODEL="{MODEL_CONFIG_CHECK}"')


def check_connection(client, model: str) -> bool:
    """Send a tiny chat completion and report the reply and usage"""
    print(f'🧪 Testing API connection with model {model}...')
    try:
        response = client.chat.completions.create(
            model=model,
            messages=[{
                "role": "user",
                "content": "Hello! This is a test message to verify the Groq connection.",
            }],
            max_tokens=50,
            temperature=0,
        )
    except GroqError as e:
        print(f'❌ API call failed: {e}')
        print('\n🔧 Troubleshooting:')
        print('  - Check that GROQ_API_KEY is valid and not revoked')
        print('  - Check that the MODEL name is available to your account')
        return False

    if not response.choices or not response.choices[0].message.content:
        print('❌ API call returned no content')
        return False

    print('✅ API connection successful!')
    print(f'📝 Response: {response.choices[0].message.content.strip()}')
    usage = getattr(response, 'usage', None)
    if usage is not None:
        print(f'📊 Tokens used: {usage.total_tokens}')
    return True


def main() -> int:
    print('🔍 Checking Groq configuration...\n')

    if load_dotenv(ENV_FILE):
        print('✅ Loaded configuration from .env file\n')
    else:
        print('📝 No .env file found, checking system environment variables...\n')

    if not report_variables(os.environ):
        print('❌ Missing required environment variables!\n')
        print_setup_help()
        return 1

    client = Groq(api_key=os.environ['GROQ_API_KEY'])
    model = os.environ.get('MODEL') or MODEL_CONFIG_CHECK
    if not check_connection(client, model):
        return 1

    print('\n🎉 Configuration looks good. The action is ready to use.')
    return 0


if __name__ == '__main__':
    sys.exit(main())
