"""Starter knowledge base content.

Seeded into PostgreSQL by the `seed_sample_articles` migration and loaded into
the in-memory store in DEMO_MODE. Listed oldest first.
"""

SAMPLE_ARTICLES: list[dict] = [
    {
        "title": "React Component Best Practices",
        "content": """# React Component Best Practices

## 1. Component Structure

Keep components small and focused. One component should do one thing:

```jsx
function UserCard({ user }) {
  return (
    <div className="user-card">
      <Avatar src={user.avatarUrl} />
      <h3>{user.name}</h3>
    </div>
  );
}
```

## 2. Hooks

- Call hooks only at the top level of a component
- Extract repeated stateful logic into custom hooks (`useFetch`, `useDebounce`)
- List every dependency in `useEffect` dependency arrays

## 3. Props

- Destructure props in the function signature
- Provide sensible defaults
- Prefer composition (`children`) over deep prop drilling
""",
        "keywords": ["react", "components", "best-practices", "javascript", "frontend", "jsx", "hooks"],
        "category": "Frontend",
        "author": "John Doe",
    },
    {
        "title": "API Authentication with JWT",
        "content": """# API Authentication with JWT

Our APIs authenticate requests with JSON Web Tokens.

## Issuing tokens

```javascript
const token = jwt.sign(
  { userId: user.id, email: user.email },
  process.env.JWT_SECRET,
  { expiresIn: '24h' }
);
```

## Verifying tokens

Every protected route passes through the `authenticateToken` middleware,
which reads the `Authorization: Bearer <token>` header and returns 401 when it
is missing and 403 when verification fails.

## Best Practices

- Always use HTTPS in production
- Keep access tokens short-lived and use refresh tokens
- Never store secrets in the repository
""",
        "keywords": ["jwt", "authentication", "api", "security", "backend", "nodejs", "express"],
        "category": "Backend",
        "author": "Jane Smith",
    },
    {
        "title": "Database Migration Best Practices",
        "content": """# Database Migration Best Practices

## Naming

Name migrations after what they do: `add_user_preferences_table`,
`drop_legacy_sessions`.

## Forward and rollback

Every migration ships with a rollback:

```sql
-- Forward migration
CREATE TABLE user_preferences (
  id SERIAL PRIMARY KEY,
  user_id INTEGER NOT NULL REFERENCES users(id),
  preference_key VARCHAR(100) NOT NULL,
  preference_value TEXT
);

-- Rollback
DROP TABLE user_preferences;
```

## Checklist

1. Test against a copy of production data
2. Back up before running in production
3. Avoid long locks on large tables; add indexes `CONCURRENTLY`
""",
        "keywords": ["database", "migration", "sql", "devops", "postgresql", "mysql", "schema"],
        "category": "Database",
        "author": "Mike Johnson",
    },
    {
        "title": "Docker Deployment Guide",
        "content": """# Docker Deployment Guide

## 1. Dockerfile Best Practices

Use multi-stage builds to keep production images small:

```dockerfile
FROM node:18-alpine AS builder
WORKDIR /app
COPY package*.json ./
RUN npm ci --only=production

FROM node:18-alpine AS production
WORKDIR /app
COPY --from=builder /app/node_modules ./node_modules
COPY . .
EXPOSE 3000
CMD ["npm", "start"]
```

Pin base image versions and run as a non-root user.

## 2. Docker Compose

Describe the app, database and cache as services in `docker-compose.yml`
and use `restart: unless-stopped` for long-running containers.

## 3. Production Deployment

1. Build and tag the image in CI
2. Push to the registry
3. Roll out with `docker compose up -d` and watch the health checks
4. Roll back by redeploying the previous tag
""",
        "keywords": ["docker", "deployment", "devops", "containers", "production", "ci-cd"],
        "category": "DevOps",
        "author": "Sarah Wilson",
    },
]
